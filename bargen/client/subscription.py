"""Polling subscriptions.

The store has no push channel, so chat, notifications and bargain lists
are re-read on a fixed interval. A ``Subscription`` owns one daemon
thread. Once ``cancel()`` returns, its callbacks never fire again.
"""
import logging
import threading

from bargen.client.negotiation import refresh_bargains
from bargen.config import Config

logger = logging.getLogger(__name__)


class Subscription:
    def __init__(self, fetch, callback, interval, on_error=None,
                 name='subscription'):
        if interval <= 0:
            raise ValueError('interval must be positive')
        self.fetch = fetch
        self.callback = callback
        self.interval = interval
        self.on_error = on_error
        self.name = name
        self._stop = threading.Event()
        # Held while a callback runs so cancel() can wait it out.
        self._deliver_lock = threading.Lock()
        self._thread = None

    @property
    def active(self):
        return self._thread is not None and not self._stop.is_set()

    def start(self):
        if self._thread is not None:
            raise RuntimeError(f'{self.name} already started')
        self._thread = threading.Thread(
            target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.debug("Started %s every %ss", self.name, self.interval)
        return self

    def _deliver(self, fn, value):
        with self._deliver_lock:
            if self._stop.is_set():
                return
            fn(value)

    def poll_once(self):
        try:
            value = self.fetch()
        except Exception as e:
            if self.on_error is None:
                logger.warning("%s poll failed: %s", self.name, e)
                return
            self._deliver(self.on_error, e)
            return
        try:
            self._deliver(self.callback, value)
        except Exception as e:
            if self.on_error is None:
                raise
            self._deliver(self.on_error, e)

    def _run(self):
        while not self._stop.is_set():
            try:
                self.poll_once()
            except Exception:
                # Keep polling; a failing callback only loses this round.
                logger.exception("%s callback failed", self.name)
            self._stop.wait(self.interval)

    def cancel(self):
        self._stop.set()
        # Wait for an in-flight callback, unless called from inside one.
        if threading.current_thread() is not self._thread:
            with self._deliver_lock:
                pass
        logger.debug("Cancelled %s", self.name)

    def __enter__(self):
        if self._thread is None:
            self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.cancel()
        return False


def watch_chat(client, product_id, callback, on_error=None, interval=None):
    return Subscription(
        lambda: client.get_chat_messages(product_id),
        callback,
        interval or Config.CHAT_POLL_SECONDS,
        on_error=on_error,
        name=f'chat-{product_id}',
    )


def watch_notifications(client, shop_id, callback, on_error=None,
                        interval=None):
    return Subscription(
        lambda: client.get_shopkeeper_notifications(shop_id),
        callback,
        interval or Config.NOTIFICATION_POLL_SECONDS,
        on_error=on_error,
        name=f'notifications-{shop_id}',
    )


def watch_bargains(client, product_id, callback, on_error=None,
                   interval=None):
    return Subscription(
        lambda: refresh_bargains(client, product_id),
        callback,
        interval or Config.BARGAIN_POLL_SECONDS,
        on_error=on_error,
        name=f'bargains-{product_id}',
    )

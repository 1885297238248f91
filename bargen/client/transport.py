"""HTTP transport for the client layer.

A transport has one method, ``request(method, path, json=None,
files=None, params=None, principal=None)``, and returns an object with
``status_code``, ``content`` and ``json()``. ``RequestsTransport`` talks
to a running store; tests plug in an adapter over Flask's test client.
"""
import logging

import requests

from bargen.config import Config
from bargen.errors import ServiceUnavailable

logger = logging.getLogger(__name__)

AUTH_SCHEME = 'Principal'


def auth_headers(principal):
    if not principal:
        return {}
    return {'Authorization': f'{AUTH_SCHEME} {principal}'}


class RequestsTransport:
    def __init__(self, base_url, timeout=None, session=None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout or Config.RPC_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def request(self, method, path, json=None, files=None, params=None,
                principal=None):
        url = f'{self.base_url}{path}'
        try:
            return self.session.request(
                method,
                url,
                json=json,
                files=files,
                params=params,
                headers=auth_headers(principal),
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            logger.warning("%s %s timed out after %ss", method, url,
                           self.timeout)
            raise ServiceUnavailable(
                f'Service not available: request timed out ({e})')
        except requests.ConnectionError as e:
            logger.warning("%s %s connection failed: %s", method, url, e)
            raise ServiceUnavailable(
                f'Service not available: connection failed ({e})')

    def close(self):
        self.session.close()

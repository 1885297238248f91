"""Group chat messages into threads.

A thread is one product plus the unordered pair of participants.
"""
from collections import OrderedDict


def thread_key(message):
    return (message.product_id, frozenset((message.sender, message.recipient)))


def counterpart(message, principal):
    return message.recipient if message.sender == principal else message.sender


def group_threads(messages):
    """Thread key to its messages, oldest first, threads in first-seen order."""
    threads = OrderedDict()
    for message in sorted(messages, key=lambda m: (m.timestamp, m.id)):
        threads.setdefault(thread_key(message), []).append(message)
    return threads


def thread_with(messages, product_id, principal, other):
    key = (product_id, frozenset((principal, other)))
    return group_threads(messages).get(key, [])

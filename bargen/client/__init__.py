"""Client layer for the Bargen store."""
from bargen.client.api import BargenClient, error_from_response
from bargen.client.records import SessionContext
from bargen.client.transport import RequestsTransport


def connect(base_url, principal, timeout=None):
    transport = RequestsTransport(base_url, timeout=timeout)
    return BargenClient(transport, SessionContext(principal), base_url)

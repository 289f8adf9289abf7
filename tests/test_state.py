# tests/test_state.py
from nntp_core.state import ClientStatus, SessionState


def test_initial_state():
    state = SessionState()
    assert state.status is ClientStatus.IDLE
    assert state.capabilities is None
    assert state.overview_format is None
    assert state.compression is False
    assert not state.is_connected


def test_is_connected():
    assert SessionState(status=ClientStatus.CONNECTED).is_connected
    assert SessionState(status=ClientStatus.AUTHENTICATED).is_connected
    assert not SessionState(status=ClientStatus.CLOSED).is_connected


def test_client_state_is_a_copy(client):
    snapshot = client.state
    snapshot.current_group = "alt.changed"
    snapshot.status = ClientStatus.CLOSED
    assert client.state.current_group == ""
    assert client.state.status is ClientStatus.CONNECTED


def test_client_state_copies_cached_lists(client, stub_conn, overview_fmt):
    stub_conn.prepare("LIST OVERVIEW.FMT", "215 fmt", overview_fmt)
    stub_conn.prepare("CAPABILITIES", "101 Capability list:", ["VERSION 2", "OVER"])
    schema = client.overview_format()
    client.capabilities()

    snapshot = client.state
    snapshot.overview_format.clear()
    snapshot.capabilities.append("XZVER")

    assert client.state.overview_format == schema
    assert client.state.capabilities == ["VERSION 2", "OVER"]
    assert stub_conn.sent == ["LIST OVERVIEW.FMT", "CAPABILITIES"]

import socket

import pytest

from miniftpd.entities.data_channel import (DataChannel, DataChannelError, DataConnectionMode, DataEndpoint,
                                            decode_endpoint, encode_endpoint, normalize_host, same_host)


def test_decode_port_argument():
    endpoint = decode_endpoint("192,168,1,20,4,1")
    assert endpoint == DataEndpoint("192.168.1.20", 1025)


@pytest.mark.parametrize("argument", ["127,0,0,1,0,21", "10,0,0,1,255,255", "0,0,0,0,0,0", "1,2,3,4,200,7"])
def test_decode_then_encode_is_identity(argument):
    assert encode_endpoint(decode_endpoint(argument)) == argument


def test_encode_uses_network_byte_order():
    assert encode_endpoint(DataEndpoint("127.0.0.1", 0x1234)) == "127,0,0,1,18,52"


@pytest.mark.parametrize("argument", ["127,0,0,1,4", "127,0,0,1,4,1,9", "256,0,0,1,4,1",
                                      "127,0,0,1,-1,1", "a,b,c,d,e,f", ""])
def test_malformed_port_argument(argument):
    with pytest.raises(ValueError):
        decode_endpoint(argument)


def test_normalize_ipv4_mapped_addresses():
    assert normalize_host("::ffff:10.0.0.7") == "10.0.0.7"
    assert normalize_host("10.0.0.7") == "10.0.0.7"
    assert same_host("::ffff:127.0.0.1", "127.0.0.1")
    assert not same_host("127.0.0.2", "127.0.0.1")


def test_connect_without_negotiation_fails():
    channel = DataChannel(timeout=1)
    with pytest.raises(DataChannelError):
        with channel.connect():
            pass


def test_active_connection_consumes_endpoint():
    server = socket.create_server(("127.0.0.1", 0))
    try:
        channel = DataChannel(timeout=2)
        channel.set_active(DataEndpoint("127.0.0.1", server.getsockname()[1]))
        assert channel.mode is DataConnectionMode.ACTIVE

        with channel.connect() as conn:
            peer, _ = server.accept()
            conn.sendall(b"ping")
            assert peer.recv(4) == b"ping"
            peer.close()

        assert not channel.is_ready()
        assert channel.endpoint is None
    finally:
        server.close()


def test_passive_connection_accepts_client():
    channel = DataChannel(timeout=2, expected_host="127.0.0.1")
    endpoint = channel.open_passive("127.0.0.1")
    assert channel.mode is DataConnectionMode.PASSIVE

    client = socket.create_connection((endpoint.host, endpoint.port), timeout=2)
    try:
        with channel.connect() as conn:
            conn.sendall(b"pong")
        assert client.recv(4) == b"pong"
    finally:
        client.close()

    assert not channel.is_ready()


def test_passive_advertises_configured_address():
    channel = DataChannel(timeout=1)
    try:
        endpoint = channel.open_passive("127.0.0.1", advertised_host="203.0.113.9")
        assert endpoint.host == "203.0.113.9"
    finally:
        channel.close()


def test_new_negotiation_closes_previous_listener():
    channel = DataChannel(timeout=1)
    channel.open_passive("127.0.0.1")
    first_listener = channel._listener

    channel.open_passive("127.0.0.1")
    assert first_listener.fileno() == -1
    assert channel._listener is not first_listener

    channel.set_active(DataEndpoint("127.0.0.1", 2121))
    assert channel._listener is None
    assert channel.mode is DataConnectionMode.ACTIVE


def test_passive_accept_timeout_raises():
    channel = DataChannel(timeout=0.2)
    channel.open_passive("127.0.0.1")
    with pytest.raises(DataChannelError):
        with channel.connect():
            pass
    assert not channel.is_ready()


def test_active_connect_refused_raises():
    probe = socket.create_server(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()

    channel = DataChannel(timeout=1)
    channel.set_active(DataEndpoint("127.0.0.1", port))
    with pytest.raises(DataChannelError):
        with channel.connect():
            pass

import json
import threading
import time

from airwatch_client.stream import FixedDelay, ReconnectPolicy, StreamClient


class FakeSocket:
    """Yields the given frames, or blocks until closed when ``hold`` is set."""

    def __init__(self, frames=(), hold=False):
        self.frames = list(frames)
        self.hold = hold
        self.sent = []
        self.closed = threading.Event()

    def __iter__(self):
        yield from self.frames
        if self.hold:
            self.closed.wait(timeout=5)

    def send(self, data):
        self.sent.append(json.loads(data))

    def close(self):
        self.closed.set()


class RecordingPolicy:
    def __init__(self):
        self.calls = []

    def next_delay(self, *, success: bool) -> float:
        self.calls.append(success)
        return 0.0


def refuse(url):
    raise ConnectionRefusedError("nobody home")


def test_fixed_delay_is_constant():
    """The reconnect delay does not grow with failures."""
    policy = FixedDelay(5.0)
    assert isinstance(policy, ReconnectPolicy)
    assert [policy.next_delay(success=False) for _ in range(3)] == [5.0, 5.0, 5.0]
    assert policy.next_delay(success=True) == 5.0


def test_stops_after_max_attempts():
    """Each failed attempt waits the policy delay; the client gives up at the limit."""
    policy = RecordingPolicy()
    client = StreamClient("ws://test/ws", lambda m: None, policy=policy, max_attempts=3, connector=refuse)

    client.start()
    client.join(timeout=2.0)

    assert not client.is_alive()
    assert client.attempts == 3
    assert policy.calls == [False, False, False]


def test_dispatches_json_frames_and_skips_garbage():
    received = []
    sockets = [FakeSocket(['{"type": "connection"}', "not json", '{"type": "iot_update", "deviceId": "d1"}'])]
    client = StreamClient(
        "ws://test/ws",
        received.append,
        policy=RecordingPolicy(),
        max_attempts=1,
        connector=lambda url: sockets[0],
    )

    client.start()
    client.join(timeout=2.0)

    assert [m["type"] for m in received] == ["connection", "iot_update"]
    assert sockets[0].closed.is_set()


def test_reconnects_with_a_new_connection_after_close():
    opened = []

    def connector(url):
        ws = FakeSocket(['{"type": "connection"}'])
        opened.append(ws)
        return ws

    policy = RecordingPolicy()
    client = StreamClient("ws://test/ws", lambda m: None, policy=policy, max_attempts=2, connector=connector)
    client.start()
    client.join(timeout=2.0)

    assert len(opened) == 2
    assert opened[0] is not opened[1]
    assert policy.calls == [True, True]


def test_handler_errors_do_not_stop_the_client():
    def handler(message):
        raise RuntimeError("boom")

    client = StreamClient(
        "ws://test/ws",
        handler,
        policy=RecordingPolicy(),
        max_attempts=1,
        connector=lambda url: FakeSocket(['{"type": "connection"}', '{"type": "connection"}']),
    )
    client.start()
    client.join(timeout=2.0)
    assert client.attempts == 1


def test_stop_interrupts_the_reconnect_wait():
    client = StreamClient("ws://test/ws", lambda m: None, policy=FixedDelay(60.0), connector=refuse)
    client.start()
    time.sleep(0.1)

    client.stop()
    client.join(timeout=1.0)
    assert not client.is_alive()


def test_send_uses_the_live_connection():
    ws = FakeSocket(hold=True)
    client = StreamClient("ws://test/ws", lambda m: None, policy=RecordingPolicy(), connector=lambda url: ws)

    assert client.send({"type": "subscribe", "subscription": "iot_updates"}) is False
    client.start()
    for _ in range(50):
        if client.send({"type": "subscribe", "subscription": "iot_updates"}):
            break
        time.sleep(0.01)

    client.stop()
    client.join(timeout=1.0)
    assert ws.sent == [{"type": "subscribe", "subscription": "iot_updates"}]
    assert ws.closed.is_set()

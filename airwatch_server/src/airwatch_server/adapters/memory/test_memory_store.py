import dataclasses
import threading

import pytest
from airwatch_core.domain.errors import InvalidInput
from airwatch_core.domain.models import (
    AQIReading,
    ChatMessage,
    DeviceReading,
    VoiceCommand,
    reading_fields,
)

from airwatch_server.adapters.memory.store import InMemoryConversationStore, InMemoryReadingStore
from airwatch_server.utils.clock import MonotonicClock
from airwatch_server.utils.factories import AQIReadingFactory, DeviceReadingFactory


class StepClock:
    """Deterministic clock: 100.0, 101.0, 102.0, ..."""

    def __init__(self, start: float = 100.0):
        self.now = start - 1

    def __call__(self):
        self.now += 1
        return self.now


@pytest.fixture()
def store():
    return InMemoryReadingStore(clock=StepClock())


# ───────── append / latest ─────────
def test_append_then_latest_returns_equal_record_with_id_and_ts(store):
    reading = AQIReadingFactory(location="Test City")
    stored = store.append(reading)

    latest = store.latest("Test City")
    assert latest == stored
    assert latest.id is not None and latest.ts is not None
    assert reading_fields(latest) == reading_fields(reading)


def test_caller_supplied_id_and_timestamp_are_ignored(store):
    stored = store.append(AQIReadingFactory(id="mine", ts=1.0))
    assert stored.id != "mine"
    assert stored.ts == 100.0


def test_latest_returns_none_when_nothing_matches(store):
    store.append(AQIReadingFactory(location="Delhi"))
    assert store.latest("Mumbai") is None


def test_malformed_append_leaves_store_unchanged(store):
    store.append(AQIReadingFactory(location="Delhi"))
    with pytest.raises(InvalidInput):
        store.append(AQIReadingFactory(location="Delhi", pm25=None))
    with pytest.raises(InvalidInput):
        store.append({"location": "Delhi"})  # type: ignore[arg-type]
    assert len(store) == 1


def test_matching_is_case_insensitive_substring_by_default(store):
    store.append(AQIReadingFactory(location="Test City"))
    store.append(AQIReadingFactory(location="Test City North"))
    assert len(store.list("city")) == 2
    assert store.latest("NORTH").location == "Test City North"


def test_exact_match_mode_only_matches_whole_key():
    store = InMemoryReadingStore(match="exact", clock=StepClock())
    store.append(AQIReadingFactory(location="Test City"))
    store.append(AQIReadingFactory(location="Test City North"))
    assert [r.location for r in store.list("test city")] == ["Test City"]


def test_device_readings_match_on_device_id_and_location(store):
    store.append(DeviceReadingFactory(device_id="dev-1", location="Whitefield"))
    assert store.latest("DEV-1").device_id == "dev-1"
    assert store.latest("whitefield").device_id == "dev-1"


def test_kind_filters_reading_types(store):
    store.append(AQIReadingFactory(location="Test City"))
    store.append(DeviceReadingFactory(location="Test City"))
    assert isinstance(store.latest("Test City", kind=AQIReading), AQIReading)
    assert isinstance(store.latest("Test City", kind=DeviceReading), DeviceReading)
    assert len(store.list("Test City")) == 2


# ───────── list ─────────
def test_list_is_newest_first_and_bounded(store):
    for aqi in (10, 20, 30, 40):
        store.append(AQIReadingFactory(location="Test City", aqi=aqi))

    result = store.list("Test City", limit=3)
    assert [r.aqi for r in result] == [40, 30, 20]
    timestamps = [r.ts for r in result]
    assert timestamps == sorted(timestamps, reverse=True)


def test_list_with_zero_limit_is_empty_and_negative_is_rejected(store):
    store.append(AQIReadingFactory(location="Test City"))
    assert store.list("Test City", limit=0) == []
    with pytest.raises(InvalidInput):
        store.list("Test City", limit=-1)


# ───────── time range ─────────
def test_time_range_is_inclusive_and_oldest_first(store):
    for aqi in (10, 20, 30, 40, 50):  # ts 100..104
        store.append(AQIReadingFactory(location="Test City", aqi=aqi))

    result = store.list_by_time_range("test", 101.0, 103.0)
    assert [r.aqi for r in result] == [20, 30, 40]
    assert all(101.0 <= r.ts <= 103.0 for r in result)


def test_time_range_outside_data_is_empty(store):
    store.append(AQIReadingFactory(location="Test City"))
    assert store.list_by_time_range("Test City", 0.0, 50.0) == []


# ───────── capacity / clock ─────────
def test_capacity_bound_evicts_oldest_first():
    store = InMemoryReadingStore(max_readings=2, clock=StepClock())
    for aqi in (1, 2, 3):
        store.append(AQIReadingFactory(location="Test City", aqi=aqi))
    assert [r.aqi for r in store.list("Test City")] == [3, 2]


def test_invalid_store_options_are_rejected():
    with pytest.raises(InvalidInput):
        InMemoryReadingStore(match="fuzzy")
    with pytest.raises(InvalidInput):
        InMemoryReadingStore(max_readings=0)


def test_monotonic_clock_never_repeats():
    clock = MonotonicClock(now=lambda: 5.0)
    first, second, third = clock(), clock(), clock()
    assert first == 5.0
    assert first < second < third


def test_concurrent_appends_keep_every_reading():
    store = InMemoryReadingStore()

    def worker(n):
        for _ in range(50):
            store.append(DeviceReadingFactory(device_id=f"dev-{n}", location="Test City"))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    readings = store.list("Test City", limit=1000)
    assert len(readings) == 200
    assert len({r.id for r in readings}) == 200
    timestamps = [r.ts for r in readings]
    assert timestamps == sorted(timestamps, reverse=True)
    assert len(set(timestamps)) == 200


# ───────── conversations ─────────
def test_chat_history_is_oldest_first_and_keeps_the_last_n():
    conversations = InMemoryConversationStore(clock=StepClock())
    for i in range(5):
        conversations.add_message(ChatMessage(session_id="s1", role="user", content=str(i)))
    conversations.add_message(ChatMessage(session_id="s2", role="user", content="other"))

    history = conversations.history("s1", limit=3)
    assert [m.content for m in history] == ["2", "3", "4"]
    assert all(m.id and m.ts for m in history)


def test_voice_history_is_newest_first():
    conversations = InMemoryConversationStore(clock=StepClock())
    for i in range(3):
        conversations.add_voice_command(
            VoiceCommand(session_id="s1", transcript=str(i), intent="general_query")
        )
    assert [c.transcript for c in conversations.voice_history("s1", limit=2)] == ["2", "1"]


def test_stored_messages_are_new_instances():
    conversations = InMemoryConversationStore()
    message = ChatMessage(session_id="s1", role="user", content="hi")
    stored = conversations.add_message(message)
    assert message.id is None
    assert dataclasses.replace(stored, id=None, ts=None) == message

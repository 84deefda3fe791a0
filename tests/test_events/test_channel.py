"""Tests for forwarding board events to a host channel."""

import pytest

from touchline.events import (
    Channel,
    ChannelBridge,
    HistoryChangedEvent,
    PositionCommittedEvent,
)


class RecordingChannel:
    def __init__(self):
        self.published = []

    def publish(self, topic, payload):
        self.published.append((topic, payload))


@pytest.fixture
def channel():
    return RecordingChannel()


class TestChannelBridge:
    """Tests for ChannelBridge."""

    def test_channel_protocol(self, channel):
        assert isinstance(channel, Channel)
        assert not isinstance(object(), Channel)

    def test_forwards_default_events_with_prefix(self, bus, channel):
        bridge = ChannelBridge(bus, channel, prefix="board-7")
        bridge.attach()

        bus.emit(PositionCommittedEvent(entity_id="p1"))
        bus.emit(HistoryChangedEvent(action="undo"))

        assert [topic for topic, _ in channel.published] == ["board-7.position.committed"]

    def test_no_prefix(self, bus, channel):
        bridge = ChannelBridge(bus, channel)
        assert bridge.topic_for(PositionCommittedEvent()) == "position.committed"

    def test_custom_event_types(self, bus, channel):
        ChannelBridge(bus, channel, event_types=[HistoryChangedEvent]).attach()
        bus.emit(PositionCommittedEvent())
        bus.emit(HistoryChangedEvent(action="redo"))
        (topic, payload), = channel.published
        assert topic == "history.changed"
        assert payload["action"] == "redo"

    def test_detach(self, bus, channel):
        bridge = ChannelBridge(bus, channel)
        bridge.attach()
        bridge.attach()
        bridge.detach()
        assert not bridge.is_attached
        bus.emit(PositionCommittedEvent())
        assert channel.published == []
        assert bus.handler_count() == 0

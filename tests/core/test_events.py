"""Tests for the session event emitter."""

from core.game import EventEmitter, EventType, GameEvent


class TestEventEmitter:
    """Tests for subscription and delivery order."""

    def test_emit_new_reaches_catch_all(self):
        """Test handlers without a type see every event."""
        emitter = EventEmitter()
        seen = []
        emitter.subscribe(seen.append)

        event = emitter.emit_new(EventType.HAND_CLEARED, owner="player")

        assert seen == [event]
        assert event.name == "hand-cleared"
        assert event.data == {"owner": "player"}

    def test_typed_handlers_run_first(self):
        """Test type-specific handlers run before catch-all handlers."""
        emitter = EventEmitter()
        order = []
        emitter.subscribe(lambda e: order.append("all"))
        emitter.subscribe(lambda e: order.append("drawn"), EventType.CARD_DRAWN)

        emitter.emit_new(EventType.CARD_DRAWN)
        emitter.emit_new(EventType.SUPPLY_SHUFFLED)

        assert order == ["drawn", "all", "all"]

    def test_unsubscribe(self):
        """Test unsubscribed handlers stop receiving events."""
        emitter = EventEmitter()
        seen = []
        emitter.subscribe(seen.append, EventType.CARD_DRAWN)
        emitter.unsubscribe(seen.append, EventType.CARD_DRAWN)
        emitter.unsubscribe(seen.append)

        emitter.emit_new(EventType.CARD_DRAWN)

        assert seen == []

    def test_handler_may_unsubscribe_during_emit(self):
        """Test a handler removing itself does not skip the others."""
        emitter = EventEmitter()
        seen = []

        def once(event: GameEvent) -> None:
            emitter.unsubscribe(once)
            seen.append("once")

        emitter.subscribe(once)
        emitter.subscribe(lambda e: seen.append("always"))

        emitter.emit_new(EventType.CARD_DRAWN)
        emitter.emit_new(EventType.CARD_DRAWN)

        assert seen == ["once", "always", "always"]

    def test_history(self):
        """Test events are recorded in emission order."""
        emitter = EventEmitter()
        emitter.emit_new(EventType.SUPPLY_REPLENISHED, remaining=52)
        emitter.emit_new(EventType.CARD_DRAWN, index=0)
        emitter.emit_new(EventType.CARD_DRAWN, index=1)

        assert [e.event_type for e in emitter.history] == [
            EventType.SUPPLY_REPLENISHED,
            EventType.CARD_DRAWN,
            EventType.CARD_DRAWN,
        ]
        assert [e.data["index"] for e in emitter.of_type(EventType.CARD_DRAWN)] == [0, 1]

        emitter.clear_history()
        assert emitter.history == []

    def test_history_is_a_copy(self):
        """Test callers cannot rewrite the recorded history."""
        emitter = EventEmitter()
        emitter.emit_new(EventType.CARD_DRAWN)
        emitter.history.clear()
        assert len(emitter.history) == 1

    def test_str_uses_wire_name(self):
        """Test event types print as their wire names."""
        assert str(EventType.ACTION_REJECTED) == "action-rejected"

from ecs.events.bus import EventBus


def test_event_bus_emit_subscribe():
    bus = EventBus()
    received = {}

    def handler(sender, **kwargs):
        received.update(kwargs)

    bus.subscribe("piece_moved", handler)
    bus.emit("piece_moved", entity=1, x=4, y=0)

    assert received == {"entity": 1, "x": 4, "y": 0}


def test_event_bus_unsubscribe_stops_delivery():
    bus = EventBus()
    calls = []

    def handler(sender, **kwargs):
        calls.append(kwargs)

    bus.subscribe("tick", handler)
    bus.emit("tick", dt=0.016)
    bus.unsubscribe("tick", handler)
    bus.emit("tick", dt=0.016)

    assert len(calls) == 1


def test_emit_without_subscribers_is_noop():
    bus = EventBus()
    bus.emit("never_subscribed", value=1)


def test_payload_may_carry_a_name_key():
    bus = EventBus()
    received = {}
    bus.subscribe("target_changed", lambda sender, **kwargs: received.update(kwargs))
    bus.emit("target_changed", name="ethane", pattern="CC")
    assert received == {"name": "ethane", "pattern": "CC"}

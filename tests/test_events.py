from healthpath.services.events import EventBus, get_event_bus


def test_publish_reaches_every_subscriber(bus):
    seen = []
    bus.subscribe("reportsUpdated", lambda: seen.append("a"))
    bus.subscribe("reportsUpdated", lambda: seen.append("b"))
    bus.subscribe("other", lambda: seen.append("x"))
    assert bus.publish("reportsUpdated") == 2
    assert seen == ["a", "b"]


def test_unsubscribe_is_idempotent(bus):
    seen = []
    sub = bus.subscribe("e", lambda: seen.append(1))
    sub.unsubscribe()
    sub.unsubscribe()
    assert bus.publish("e") == 0
    assert bus.subscriber_count("e") == 0
    assert seen == []


def test_failing_subscriber_does_not_block_others(bus):
    seen = []

    def boom():
        raise RuntimeError("bad listener")

    bus.subscribe("e", boom)
    bus.subscribe("e", lambda: seen.append("ok"))
    assert bus.publish("e") == 1
    assert seen == ["ok"]


def test_subscriber_may_unsubscribe_while_handling(bus):
    seen = []
    holder = {}

    def once():
        seen.append(1)
        holder["sub"].unsubscribe()

    holder["sub"] = bus.subscribe("e", once)
    bus.publish("e")
    bus.publish("e")
    assert seen == [1]


def test_process_wide_bus_is_shared():
    assert get_event_bus() is get_event_bus()
    assert isinstance(get_event_bus(), EventBus)

from tokenvault.core.events import EventLog, EventType


def test_emit_appends_and_notifies():
    log = EventLog()
    received = []
    log.subscribe(received.append)

    event = log.emit(EventType.LOCKED, 100, depositor="0xalice", amount=5)

    assert received == [event]
    assert log.events == [event]
    assert event.to_dict() == {
        "event_type": "locked",
        "payload": {"depositor": "0xalice", "amount": 5},
        "timestamp": 100,
    }


def test_failing_listener_does_not_break_emit():
    log = EventLog()
    received = []

    def broken(event):
        raise RuntimeError("listener down")

    log.subscribe(broken)
    log.subscribe(received.append)

    log.emit(EventType.VOTE_CAST, 1, proposal_id=1)

    assert len(received) == 1
    assert len(log) == 1


def test_filter_and_unsubscribe():
    log = EventLog()
    received = []
    log.subscribe(received.append)
    log.emit(EventType.LOCKED, 1)
    log.unsubscribe(received.append)
    log.emit(EventType.RELEASED, 2)
    log.emit(EventType.RELEASED, 3)

    assert len(received) == 1
    assert [e.timestamp for e in log.filter(EventType.RELEASED)] == [2, 3]

from quire.events import EventEmitter


def test_emit_calls_listeners_in_order():
    emitter = EventEmitter()
    calls = []
    emitter.on("built", lambda pages, errors: calls.append(("first", pages, errors)))
    emitter.on("built", lambda pages, errors: calls.append(("second", pages, errors)))
    assert emitter.emit("built", 3, 1)
    assert calls == [("first", 3, 1), ("second", 3, 1)]


def test_emit_without_listeners():
    assert not EventEmitter().emit("error", ValueError("x"))


def test_off_removes_listener():
    emitter = EventEmitter()
    calls = []
    listener = emitter.on("parsing", lambda: calls.append("parsing"))
    emitter.off("parsing", listener)
    emitter.off("parsing", listener)
    emitter.emit("parsing")
    assert calls == []

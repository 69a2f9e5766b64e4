from bakery_ledger.data.models import StoreResponse
from bakery_ledger.ledger.saga import Saga


def recorder(log, name, ok=True):
    def action(ctx):
        log.append(name)
        return StoreResponse.success(name) if ok else StoreResponse.failure(f"{name} failed", "X1")
    return action


def test_runs_steps_in_order():
    log = []
    result = Saga("t").add_step("a", recorder(log, "a")).add_step("b", recorder(log, "b")).run()
    assert result.ok
    assert log == ["a", "b"]
    assert [s.name for s in result.completed] == ["a", "b"]


def test_stops_at_first_failure():
    log = []
    result = (
        Saga("t")
        .add_step("a", recorder(log, "a"))
        .add_step("b", recorder(log, "b", ok=False), key="cust-b")
        .add_step("c", recorder(log, "c"))
        .run()
    )
    assert not result.ok
    assert log == ["a", "b"]
    assert result.failed_step.key == "cust-b"
    assert result.error.message == "b failed"
    assert result.error.code == "X1"


def test_completed_steps_are_compensated_in_reverse():
    log = []
    result = (
        Saga("t")
        .add_step("a", recorder(log, "a"), compensate=recorder(log, "undo a"))
        .add_step("b", recorder(log, "b"))
        .add_step("c", recorder(log, "c"), compensate=recorder(log, "undo c"))
        .add_step("d", recorder(log, "d", ok=False))
        .run()
    )
    assert log == ["a", "b", "c", "d", "undo c", "undo a"]
    assert result.compensation_errors == []


def test_compensation_failures_are_collected():
    log = []
    result = (
        Saga("t")
        .add_step("a", recorder(log, "a"), compensate=recorder(log, "undo a", ok=False))
        .add_step("b", recorder(log, "b", ok=False))
        .run()
    )
    assert [e.message for e in result.compensation_errors] == ["undo a failed"]


def test_raised_exception_becomes_failure():
    def boom(ctx):
        raise RuntimeError("socket closed")

    result = Saga("t").add_step("boom", boom).run()
    assert not result.ok
    assert result.error.message == "socket closed"


def test_context_is_shared_between_steps():
    def first(ctx):
        ctx["id"] = "order-1"
        return StoreResponse.success()

    seen = []

    def second(ctx):
        seen.append(ctx["id"])
        return StoreResponse.success()

    result = Saga("t").add_step("first", first).add_step("second", second).run({"committed": []})
    assert seen == ["order-1"]
    assert result.context["committed"] == []

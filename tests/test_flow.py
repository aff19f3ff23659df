from __future__ import annotations

from tempo_tx.flow import (
    EXECUTION_NOT_IMPLEMENTED,
    execute_flow,
    format_flow_summary,
    next_step_id,
    simulate_flow,
)
from tempo_tx.model import Flow, FlowStep, Transaction
from tempo_tx.rpc_client import RPCError

SENDER = "0x" + "11" * 20
FIRST = "0x" + "aa" * 20
SECOND = "0x" + "bb" * 20
THIRD = "0x" + "cc" * 20


class ScriptedChain:
    """Returns per-target gas and fails calls for targets listed in ``failing``."""

    def __init__(self, gas_by_target: dict[str, int], failing: set[str] = frozenset()) -> None:
        self.gas_by_target = gas_by_target
        self.failing = failing
        self.events: list[tuple[str, str]] = []

    def estimate_gas(self, params):
        self.events.append(("estimate", params["to"]))
        if params["to"] in self.failing:
            raise RPCError(3, "execution reverted")
        return self.gas_by_target[params["to"]]

    def eth_call(self, params):
        self.events.append(("call", params["to"]))
        return {"data": "0x" + "ab" * 40}

    def get_transaction_count(self, address):
        return 0


def make_flow() -> Flow:
    return Flow(
        name="Payroll",
        description="Pay three vendors",
        steps=[
            FlowStep(
                id="step-1",
                name="third first",
                transaction=Transaction(from_address=SENDER, to=THIRD),
                dependencies=("step-3",),
            ),
            FlowStep(id="step-2", name="no sender", transaction=Transaction(to=SECOND)),
            FlowStep(id="step-3", name="last", transaction=Transaction(from_address=SENDER, to=FIRST)),
        ],
    )


def test_steps_run_in_stored_order_regardless_of_dependencies() -> None:
    chain = ScriptedChain({THIRD: 30_000, FIRST: 10_000})
    flow = make_flow()

    reports = simulate_flow(chain, flow)

    assert [report.step.id for report in reports] == ["step-1", "step-2", "step-3"]
    assert chain.events == [
        ("estimate", THIRD),
        ("call", THIRD),
        ("call", SECOND),
        ("estimate", FIRST),
        ("call", FIRST),
    ]
    assert all(report.success for report in reports)


def test_estimates_are_written_back_to_steps() -> None:
    flow = make_flow()

    reports = simulate_flow(ScriptedChain({THIRD: 30_000, FIRST: 10_000}), flow)

    assert flow.steps[0].transaction.gas == 30_000
    assert flow.steps[1].transaction.gas is None
    assert flow.steps[2].transaction.gas == 10_000
    assert reports[1].gas_estimate is None


def test_failed_estimate_skips_simulation_but_not_later_steps() -> None:
    chain = ScriptedChain({FIRST: 10_000}, failing={THIRD})
    messages: list[str] = []

    reports = simulate_flow(chain, make_flow(), progress=messages.append)

    assert not reports[0].success
    assert reports[0].result is None
    assert reports[0].error == "Gas estimation failed: execution reverted"
    assert ("call", THIRD) not in chain.events
    assert reports[2].success
    assert "Error: Gas estimation failed: execution reverted" in messages


def test_progress_reports_truncated_return_data() -> None:
    messages: list[str] = []
    simulate_flow(ScriptedChain({THIRD: 1, FIRST: 1}), make_flow(), progress=messages.append)

    preview = [message for message in messages if "Return data" in message][0]
    assert preview == "   Return data: " + ("0x" + "ab" * 40)[:66] + "..."


def test_summary_lists_dependencies() -> None:
    summary = format_flow_summary(make_flow())

    assert summary.splitlines()[:3] == ["Name: Payroll", "Description: Pay three vendors", "Steps: 3"]
    assert "1. third first (step-1)" in summary
    assert "   Depends on: step-3" in summary


def test_next_step_id_counts_existing_steps() -> None:
    assert next_step_id(Flow(name="empty")) == "step-1"
    assert next_step_id(make_flow()) == "step-4"


def test_execute_flow_reports_not_implemented() -> None:
    messages: list[str] = []
    execute_flow(make_flow(), progress=messages.append)
    assert messages == [EXECUTION_NOT_IMPLEMENTED]


def test_unexpected_step_error_does_not_abort_flow() -> None:
    chain = ScriptedChain({FIRST: 10_000})
    flow = Flow(
        name="Broken",
        steps=[
            FlowStep(id="step-1", name="bad", transaction=Transaction(from_address=SENDER, to=123)),
            FlowStep(id="step-2", name="good", transaction=Transaction(from_address=SENDER, to=FIRST)),
        ],
    )
    messages: list[str] = []

    reports = simulate_flow(chain, flow, progress=messages.append)

    assert not reports[0].success
    assert reports[0].error
    assert reports[1].success
    assert chain.events == [("estimate", FIRST), ("call", FIRST)]
    assert any(message.startswith("Error: ") for message in messages)

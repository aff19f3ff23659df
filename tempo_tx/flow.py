"""Sequential preview of multi-step transaction flows.

Steps run strictly in stored order. Declared dependencies are shown to the
user but never reorder or gate a step.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List

from .model import Flow, FlowStep, TransactionResult
from .simulator import ChainClient, GasEstimationError, estimate_gas, simulate_transaction

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]

EXECUTION_NOT_IMPLEMENTED = (
    "Execution not yet implemented. Use the explorer or a wallet to execute these transactions."
)
RETURN_DATA_PREVIEW_CHARS = 66


@dataclass
class FlowStepReport:
    step: FlowStep
    gas_estimate: int | None = None
    error: str | None = None
    result: TransactionResult | None = None

    @property
    def success(self) -> bool:
        return self.error is None and self.result is not None and self.result.success


def next_step_id(flow: Flow) -> str:
    return f"step-{len(flow.steps) + 1}"


def format_flow_summary(flow: Flow) -> str:
    lines = [f"Name: {flow.name}"]
    if flow.description:
        lines.append(f"Description: {flow.description}")
    lines.append(f"Steps: {len(flow.steps)}")
    lines.append("")
    for index, step in enumerate(flow.steps, start=1):
        lines.append(f"{index}. {step.name} ({step.id})")
        if step.dependencies:
            lines.append(f"   Depends on: {', '.join(step.dependencies)}")
    return "\n".join(lines)


def _noop(_: str) -> None:
    return None


def _run_step(client: ChainClient, step: FlowStep, report: FlowStepReport, emit: ProgressCallback) -> None:
    if step.transaction.from_address:
        gas = estimate_gas(client, step.transaction)
        report.gas_estimate = gas
        step.transaction = step.transaction.with_gas(gas)
        emit(f"Estimated gas: {gas}")

    result = simulate_transaction(client, step.transaction)
    report.result = result
    if result.success:
        emit("Simulation successful")
        if result.return_data:
            emit(f"   Return data: {result.return_data[:RETURN_DATA_PREVIEW_CHARS]}...")
    else:
        emit("Simulation failed")
        if result.error:
            emit(f"   Error: {result.error}")


def simulate_flow(
    client: ChainClient,
    flow: Flow,
    progress: ProgressCallback | None = None,
) -> List[FlowStepReport]:
    """Estimate and simulate each step of ``flow`` in order.

    Steps without a ``from`` address skip gas estimation. A successful
    estimate is written back into the step's transaction. Any failure ends
    the step and is recorded on its report; later steps still run.
    """

    emit = progress or _noop
    reports: List[FlowStepReport] = []
    for step in flow.steps:
        emit(f"\n{step.name}")
        report = FlowStepReport(step=step)
        try:
            _run_step(client, step, report, emit)
        except GasEstimationError as exc:
            report.error = str(exc)
            emit(f"Error: {exc}")
            logger.info("Step %s failed gas estimation: %s", step.id, exc)
        except Exception as exc:
            report.error = str(exc) or exc.__class__.__name__
            emit(f"Error: {report.error}")
            logger.exception("Step %s failed", step.id)
        reports.append(report)
    return reports


def execute_flow(flow: Flow, progress: ProgressCallback | None = None) -> None:
    """Placeholder for flow execution; signing and broadcasting live elsewhere."""

    emit = progress or _noop
    logger.info("Execution requested for flow %r (%d steps)", flow.name, len(flow.steps))
    emit(EXECUTION_NOT_IMPLEMENTED)

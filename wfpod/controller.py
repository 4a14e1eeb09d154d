"""
Controller entry point: compile a step and submit its pod.

Called by the workflow reconciliation loop once per step that has no pod
yet. Errors propagate unchanged: BadRequestError means the workflow should
fail the step, InternalError means the loop may retry its pass.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from wfpod.compiler import Compiler
from wfpod.schemas import ExecutionUnit, Template, WorkflowContext
from wfpod.submit import PodClient, SubmitOutcome, submit_unit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PodCreation:
    """Result of creating a workflow pod."""
    unit: ExecutionUnit
    outcome: SubmitOutcome

    @property
    def pod_name(self) -> str:
        return self.unit.name


def create_workflow_pod(
    step_name: str,
    template: Template,
    ctx: WorkflowContext,
    client: PodClient,
    timeout: Optional[float] = None,
) -> PodCreation:
    """
    Compile the step's template and create its pod.

    Args:
        step_name: Node name of the step
        template: The step's template
        ctx: The owning workflow
        client: Pod client used for submission
        timeout: Submission timeout in seconds

    Returns:
        PodCreation with the compiled unit and the submission outcome
    """
    logger.info(f"Creating Pod: {step_name}", extra={"workflow": ctx.name})
    unit = Compiler(ctx).compile(step_name, template)
    outcome = submit_unit(unit, client, timeout=timeout)
    return PodCreation(unit=unit, outcome=outcome)

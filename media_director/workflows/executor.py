"""Sequential workflow execution against a generation provider."""

import logging
from typing import TYPE_CHECKING, Optional

from media_director.augmentation.audit import ContentFilterLog
from media_director.errors import ProviderError, WorkflowStepError
from media_director.providers.base import (
    DEFAULT_JOB_TIMEOUT,
    DEFAULT_POLL_INTERVAL,
    GenerationProvider,
    run_to_completion,
)
from media_director.workflows.schemas import Workflow, WorkflowStatus

if TYPE_CHECKING:
    from media_director.session.schemas import ConversationState

logger = logging.getLogger(__name__)


async def execute(
    workflow: Workflow,
    provider: GenerationProvider,
    state: "ConversationState",
    *,
    audit_log: Optional[ContentFilterLog] = None,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    timeout: float = DEFAULT_JOB_TIMEOUT,
    raise_on_failure: bool = False,
) -> Workflow:
    """Run every step in order, stopping at the first failure.

    Completed steps keep their results. Each result becomes the session's
    last produced asset. With ``raise_on_failure`` a failed step raises
    WorkflowStepError after the workflow has been marked failed.
    """
    workflow.status = WorkflowStatus.IN_PROGRESS
    total = len(workflow.steps)

    for index, step in enumerate(workflow.steps):
        workflow.current_step_index = index
        step.status = WorkflowStatus.IN_PROGRESS
        logger.info(f"[{workflow.id}] Step {index + 1}/{total} ({step.id}) on {step.model_id}")

        try:
            result = await run_to_completion(
                provider, step.model_id, step.parameters, poll_interval=poll_interval, timeout=timeout
            )
        except ProviderError as e:
            step.status = WorkflowStatus.FAILED
            step.error = str(e)
            workflow.status = WorkflowStatus.FAILED
            workflow.failed_step_id = step.id
            workflow.error = str(e)
            if audit_log is not None and step.generation_id:
                audit_log.mark_result(step.generation_id, success=False)
            logger.error(f"[{workflow.id}] Step {step.id} failed, halting workflow: {e}")
            if raise_on_failure:
                raise WorkflowStepError(step.id, str(e)) from e
            return workflow

        step.status = WorkflowStatus.COMPLETED
        step.result_ref = result.result_ref
        state.record_asset(result.result_ref, step.category)
        if audit_log is not None and step.generation_id:
            audit_log.mark_result(step.generation_id, success=True)

    workflow.current_step_index = max(total - 1, 0)
    workflow.status = WorkflowStatus.COMPLETED
    logger.info(f"[{workflow.id}] Workflow completed: {total} step(s)")
    return workflow

"""Exception hierarchy for the decision core.

Advisory failures never escape the core: they are caught where the
advisory call is made and the heuristic result stands. The other errors
surface to callers (the API maps them to HTTP status codes).
"""

from typing import Optional


class MediaDirectorError(Exception):
    """Base class for all decision-core errors."""


class SessionBusyError(MediaDirectorError):
    """A second turn arrived while the session already had one in flight."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session '{session_id}' already has a turn in progress")


class SelectionError(MediaDirectorError):
    """No capability could be resolved for the requested category."""

    def __init__(self, category: str, registry_snapshot: Optional[list[str]] = None):
        self.category = category
        self.registry_snapshot = registry_snapshot or []
        super().__init__(
            f"No suitable model for category '{category}' "
            f"({len(self.registry_snapshot)} capabilities registered)"
        )


class AdvisoryError(MediaDirectorError):
    """The advisory language service failed or returned an unusable answer."""


class ProviderError(MediaDirectorError):
    """A generation provider rejected or failed a job."""


class WorkflowStepError(MediaDirectorError):
    """A workflow step failed and halted the workflow."""

    def __init__(self, step_id: str, reason: str):
        self.step_id = step_id
        self.reason = reason
        super().__init__(f"Workflow step '{step_id}' failed: {reason}")


class UnknownEntryError(MediaDirectorError):
    """Lookup of a capability, director or suggestion by name failed."""


class GenerationNotAuthorizedError(MediaDirectorError):
    """Pending generation was submitted before the session authorized it."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session '{session_id}' has not authorized generation")

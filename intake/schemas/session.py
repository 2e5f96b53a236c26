"""Session read model handed to the presentation layer on every render."""

from enum import Enum

from pydantic import BaseModel, ConfigDict

from intake.schemas.drafts import DraftStatus, FormData


class SessionPhase(str, Enum):
    """Draft session lifecycle: loading -> ready, or loading -> failed."""

    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class ActionOutcome(str, Enum):
    """Result of a session operation. Refusals are values, not exceptions."""

    OK = "ok"
    VALIDATION_BLOCKED = "validation_blocked"
    READ_ONLY = "read_only"
    NOT_READY = "not_ready"
    CLOSED = "closed"
    SAVE_FAILED = "save_failed"
    SUBMIT_FAILED = "submit_failed"


class SessionSnapshot(BaseModel):
    """Immutable view of a draft session at one point in time."""

    model_config = ConfigDict(frozen=True)

    draft_id: str | None
    phase: SessionPhase
    form: FormData
    step: int
    step_key: str
    step_title: str
    total_steps: int
    status: DraftStatus
    dirty: bool
    save_in_flight: bool
    can_proceed: bool
    field_errors: dict[str, str] = {}

    @property
    def save_label(self) -> str:
        """Saving indicator text."""
        return "Saving…" if self.save_in_flight else "Saved"

    @property
    def is_last_step(self) -> bool:
        return self.step == self.total_steps - 1

    @property
    def read_only(self) -> bool:
        return self.status == DraftStatus.SUBMITTED

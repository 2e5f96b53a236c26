class IntakeError(Exception):
    """Base exception for the intake package."""

    pass


class DraftStoreError(IntakeError):
    """Raised when the draft store cannot complete a request."""

    pass


class DraftNotFoundError(DraftStoreError):
    """Raised when a draft id is unknown to the store."""

    def __init__(self, draft_id: str):
        self.draft_id = draft_id
        super().__init__(f"Draft '{draft_id}' not found")


class SaveError(DraftStoreError):
    """Raised when a draft patch is not acknowledged."""

    pass


class SubmitError(DraftStoreError):
    """Raised when a draft submission is not acknowledged."""

    pass


class ValidationBlockedError(IntakeError):
    """Raised when a step's requirements are not met for forward navigation or submission."""

    def __init__(self, step: int, missing: list[str]):
        self.step = step
        self.missing = missing
        if missing:
            super().__init__(f"Step {step} is incomplete: {', '.join(missing)}")
        else:
            super().__init__(f"Step {step} cannot proceed")

"""DraftStore Protocol: the persistence contract consumed by draft sessions.

All DraftStore implementations MUST provide these 4 methods:
- create: Allocate a new empty draft and return its id
- fetch: Read a draft by id
- patch: Replace a draft's form data and step pointer
- submit: Mark a draft as submitted

Implementations translate their own failures into the intake exception
hierarchy (DraftNotFoundError, SaveError, SubmitError, DraftStoreError).
"""

from typing import Protocol, runtime_checkable

from intake.schemas.drafts import DraftRecord, NewDraft, PatchDraft


@runtime_checkable
class DraftStore(Protocol):
    """Protocol for the out-of-process draft store.

    This abstraction enables:
    1. Deterministic session tests with DraftStoreFake
    2. Swapping the HTTP backend without touching session logic
    """

    async def create(self) -> NewDraft:
        """Create an empty draft at step 0 with status ``draft``.

        Returns:
            NewDraft with the new id (and a resume url when the store builds one)

        Raises:
            DraftStoreError: If the draft could not be created
        """
        ...

    async def fetch(self, draft_id: str) -> DraftRecord:
        """Read a draft.

        Args:
            draft_id: Draft identifier

        Returns:
            The stored DraftRecord

        Raises:
            DraftNotFoundError: If the id is unknown
            DraftStoreError: On any other failure
        """
        ...

    async def patch(self, draft_id: str, body: PatchDraft) -> DraftRecord:
        """Replace the stored form data (and step, when given).

        Full-snapshot semantics: repeating or reordering patches with complete
        snapshots leaves the store in the state of the last one applied.

        Args:
            draft_id: Draft identifier
            body: Complete form snapshot and optional step pointer

        Returns:
            The DraftRecord after the update

        Raises:
            SaveError: On any non-success outcome
        """
        ...

    async def submit(self, draft_id: str) -> DraftRecord:
        """Mark a draft as submitted.

        Args:
            draft_id: Draft identifier

        Returns:
            The DraftRecord after the update; ``status`` is the acknowledged status

        Raises:
            SubmitError: On any non-success outcome
        """
        ...

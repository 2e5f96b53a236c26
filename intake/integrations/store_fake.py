"""DraftStoreFake: Scenario-based test double for the DraftStore protocol.

Keeps drafts in memory with the same semantics as the HTTP API:
- patch replaces the whole form and, when given, the step pointer
- patch only applies while the stored status is ``draft``
- submit flips status to ``submitted``

Named scenarios:
- happy_path: every request succeeds
- save_failure: patch raises SaveError
- submit_failure: submit raises SubmitError
- store_down: every request fails

Patches can be held open with ``hold()`` / ``release()`` to stage
in-flight races deterministically.
"""

import asyncio
import uuid
from datetime import UTC, datetime

from intake.core.exceptions import DraftNotFoundError, DraftStoreError, SaveError, SubmitError
from intake.schemas.drafts import DraftRecord, DraftStatus, FormData, NewDraft, PatchDraft


class DraftStoreFake:
    """In-memory DraftStore with failure scenarios and request recording."""

    VALID_SCENARIOS = {"happy_path", "save_failure", "submit_failure", "store_down"}

    def __init__(self, scenario: str = "happy_path"):
        """Initialize DraftStoreFake with a named scenario.

        Raises:
            ValueError: If scenario is not recognized
        """
        if scenario not in self.VALID_SCENARIOS:
            raise ValueError(f"Unknown scenario: {scenario}. Valid scenarios: {self.VALID_SCENARIOS}")
        self.scenario = scenario
        self.drafts: dict[str, DraftRecord] = {}
        self.patches: list[tuple[str, PatchDraft]] = []
        self.submits: list[str] = []
        self._gate = asyncio.Event()
        self._gate.set()

    def seed(
        self,
        draft_id: str,
        data: FormData | None = None,
        step: int = 0,
        status: DraftStatus = DraftStatus.DRAFT,
    ) -> DraftRecord:
        """Insert a stored draft directly, bypassing scenarios."""
        now = datetime.now(UTC).isoformat()
        record = DraftRecord(
            id=draft_id,
            data=data or FormData(),
            step=step,
            status=status,
            created_at=now,
            updated_at=now,
        )
        self.drafts[draft_id] = record
        return record

    def hold(self) -> None:
        """Block patch responses until release()."""
        self._gate.clear()

    def release(self) -> None:
        self._gate.set()

    async def create(self) -> NewDraft:
        if self.scenario == "store_down":
            raise DraftStoreError("Draft store unavailable")
        draft_id = str(uuid.uuid4())
        self.seed(draft_id)
        return NewDraft(id=draft_id)

    async def fetch(self, draft_id: str) -> DraftRecord:
        if self.scenario == "store_down":
            raise DraftStoreError("Draft store unavailable")
        record = self.drafts.get(draft_id)
        if record is None:
            raise DraftNotFoundError(draft_id)
        return record.model_copy()

    async def patch(self, draft_id: str, body: PatchDraft) -> DraftRecord:
        self.patches.append((draft_id, body))
        await self._gate.wait()

        if self.scenario in ("save_failure", "store_down"):
            raise SaveError("save failed")
        record = self.drafts.get(draft_id)
        if record is None:
            raise SaveError(f"Draft '{draft_id}' not found")

        if record.status == DraftStatus.DRAFT:
            updates: dict = {"data": body.data, "updated_at": datetime.now(UTC).isoformat()}
            if body.step is not None:
                updates["step"] = body.step
            record = record.model_copy(update=updates)
            self.drafts[draft_id] = record
        return record.model_copy()

    async def submit(self, draft_id: str) -> DraftRecord:
        self.submits.append(draft_id)
        if self.scenario in ("submit_failure", "store_down"):
            raise SubmitError("submit failed")
        record = self.drafts.get(draft_id)
        if record is None:
            raise SubmitError(f"Draft '{draft_id}' not found")

        record = record.model_copy(
            update={"status": DraftStatus.SUBMITTED, "updated_at": datetime.now(UTC).isoformat()}
        )
        self.drafts[draft_id] = record
        return record.model_copy()

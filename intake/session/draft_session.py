"""DraftSession: the draft session state machine.

Owns the in-memory form, step pointer, status and sync flags for one draft and
decides when and what to persist.

Lifecycle:
    loading -> ready(draft) -> ready(submitted)
    loading -> failed                      (draft id not resolvable)

Persistence rules:
- edit_field is synchronous: it merges the patch, marks the session dirty and
  restarts the debounce timer. Only the last edit in a burst triggers a save,
  and the save carries the form/step current when the timer fires.
- move_step, save_and_exit and submit cancel the pending timer before issuing
  their own save, so a stale autosave never overtakes an explicit one.
- dirty is cleared only when a save issued after the last edit is acknowledged.
  Edits made while a step move is saving are re-saved once the move commits.
- save_and_exit ends the session: later operations return CLOSED.
- Requests already sent are never cancelled; close() only stops the timer.
"""

import asyncio

import structlog

from intake.core.config import get_settings
from intake.core.exceptions import DraftStoreError, SaveError, SubmitError, ValidationBlockedError
from intake.domain import steps
from intake.domain.links import build_resume_url
from intake.integrations.draft_store import DraftStore
from intake.schemas.drafts import DraftRecord, DraftStatus, FormData, PatchDraft
from intake.schemas.session import ActionOutcome, SessionPhase, SessionSnapshot
from intake.session.host import SessionHost

logger = structlog.get_logger(__name__)

DRAFT_NOT_FOUND_MESSAGE = "Draft not found"
SAVE_FAILED_MESSAGE = "We couldn't save your progress. Please try again."
SUBMIT_FAILED_MESSAGE = "We couldn't submit your intake. Please try again."


class DraftSession:
    """Live state of one intake draft, mutated only through its operations."""

    def __init__(
        self,
        store: DraftStore,
        host: SessionHost,
        debounce_seconds: float | None = None,
        public_base: str | None = None,
    ):
        """Initialize an unloaded session.

        Args:
            store: DraftStore used for every request
            host: Presentation collaborator (render, notify, navigate, clipboard)
            debounce_seconds: Autosave quiet interval, defaults to settings.autosave_debounce_seconds
            public_base: Origin for resume links, defaults to settings.public_base
        """
        settings = get_settings()
        self.store = store
        self.host = host
        self.debounce_seconds = (
            debounce_seconds if debounce_seconds is not None else settings.autosave_debounce_seconds
        )
        self.public_base = public_base or settings.public_base

        self.draft_id: str | None = None
        self.phase = SessionPhase.LOADING
        self.form = FormData()
        self.step = 0
        self.status = DraftStatus.DRAFT
        self.dirty = False
        self.exited = False

        self._requests_in_flight = 0
        self._edit_seq = 0
        self._timer_generation = 0
        self._timer: asyncio.Task | None = None
        self._autosaves: set[asyncio.Task] = set()
        self._touched: set[str] = set()
        self._log = logger

    async def __aenter__(self) -> "DraftSession":
        return self

    async def __aexit__(self, *exc) -> None:
        self.close()

    # ──────────────────────────────────────────────────────────────────────
    # Read model
    # ──────────────────────────────────────────────────────────────────────

    @property
    def save_in_flight(self) -> bool:
        return self._requests_in_flight > 0

    @property
    def resume_url(self) -> str | None:
        if self.draft_id is None:
            return None
        return build_resume_url(self.public_base, self.draft_id)

    def can_proceed(self, step: int | None = None) -> bool:
        """Whether the current form satisfies ``step`` (defaults to the current step)."""
        return steps.can_proceed(self.form, self.step if step is None else step)

    def snapshot(self) -> SessionSnapshot:
        current = steps.step_at(self.step)
        field_errors = {}
        if "email" in self._touched:
            error = steps.email_error(self.form.email)
            if error:
                field_errors["email"] = error
        return SessionSnapshot(
            draft_id=self.draft_id,
            phase=self.phase,
            form=self.form,
            step=self.step,
            step_key=current.key,
            step_title=current.title,
            total_steps=len(steps.STEPS),
            status=self.status,
            dirty=self.dirty,
            save_in_flight=self.save_in_flight,
            can_proceed=self.can_proceed(),
            field_errors=field_errors,
        )

    def _render(self) -> None:
        self.host.render(self.snapshot())

    def _editable(self) -> ActionOutcome:
        if self.phase != SessionPhase.READY:
            return ActionOutcome.NOT_READY
        if self.status == DraftStatus.SUBMITTED:
            return ActionOutcome.READ_ONLY
        if self.exited:
            return ActionOutcome.CLOSED
        return ActionOutcome.OK

    # ──────────────────────────────────────────────────────────────────────
    # Operations
    # ──────────────────────────────────────────────────────────────────────

    async def load(self, draft_id: str) -> None:
        """Fetch the draft and become ready, or fail and send the user home.

        Fetched fields win over empty defaults; the stored step is clamped into
        range. Any store failure is terminal for the session (no retry).
        """
        self.draft_id = draft_id
        self._log = logger.bind(draft_id=draft_id)
        self.phase = SessionPhase.LOADING

        try:
            record = await self.store.fetch(draft_id)
        except DraftStoreError as e:
            self._log.warning("draft_load_failed", error=str(e), error_type=type(e).__name__)
            self.phase = SessionPhase.FAILED
            self._render()
            self.host.notify(DRAFT_NOT_FOUND_MESSAGE)
            self.host.navigate_home()
            return

        self._apply_record(record)
        self.phase = SessionPhase.READY
        self._log.info("draft_loaded", step=self.step, status=self.status.value)
        self._render()

    def _apply_record(self, record: DraftRecord) -> None:
        # Fields absent from the stored draft keep their empty defaults.
        self.form = record.data
        self.step = steps.clamp_step(record.step)
        self.status = record.status
        self.dirty = False

    def edit_field(self, patch: dict[str, str] | None = None, **fields: str) -> ActionOutcome:
        """Merge field values into the form and restart the autosave timer.

        Accepts a mapping (``{"fullName": "Ana"}``) and/or keyword arguments
        (``full_name="Ana"``). Never awaits network I/O.

        Raises:
            ValueError: If a key is not a form field
        """
        outcome = self._editable()
        if outcome != ActionOutcome.OK:
            return outcome

        updates = {**(patch or {}), **fields}
        self.form = self.form.merged(updates)
        self._touched.update(FormData.field_name(key) for key in updates)
        self._edit_seq += 1
        self.dirty = True
        self._schedule_autosave()
        self._render()
        return ActionOutcome.OK

    async def move_step(self, direction: int) -> ActionOutcome:
        """Save, then move one step back (-1) or forward (+1).

        Forward moves require the current step to be complete. The step pointer
        changes only after the store acknowledges the save carrying it.

        Raises:
            ValueError: If direction is not -1 or +1
        """
        if direction not in (-1, 1):
            raise ValueError(f"direction must be -1 or +1, got {direction!r}")

        outcome = self._editable()
        if outcome != ActionOutcome.OK:
            return outcome

        try:
            if direction == 1:
                self._require_can_proceed(self.step)
        except ValidationBlockedError as e:
            self._log.info("step_move_blocked", step=self.step, missing=e.missing)
            return ActionOutcome.VALIDATION_BLOCKED

        next_step = steps.clamp_step(self.step + direction)
        self._cancel_autosave()
        issued_at = self._edit_seq
        try:
            await self._save(next_step)
        except SaveError as e:
            self._log.warning("step_move_save_failed", step=self.step, next_step=next_step, error=str(e))
            self._render()
            self.host.notify(SAVE_FAILED_MESSAGE)
            return ActionOutcome.SAVE_FAILED

        previous, self.step = self.step, next_step
        self._log.info("step_moved", from_step=previous, to_step=next_step)
        if self._edit_seq != issued_at:
            # Edits made while the move was saving may have autosaved the old step.
            self._edit_seq += 1
            self.dirty = True
            self._schedule_autosave()
        self._render()
        return ActionOutcome.OK

    async def save_and_exit(self) -> ActionOutcome:
        """Flush unsaved edits, copy the resume link and go home.

        The flush is awaited when dirty; its failure is logged and does not
        stop the exit. Clipboard failures are swallowed. A session that is
        still loading has nothing to flush or link to, but still goes home.
        Once exited the session refuses further operations with CLOSED.
        """
        if self.phase != SessionPhase.READY:
            # A failed load has already navigated home.
            if self.phase == SessionPhase.LOADING:
                self.close()
                self.host.navigate_home()
            return ActionOutcome.NOT_READY
        if self.exited:
            return ActionOutcome.CLOSED

        self.exited = True
        self._cancel_autosave()
        if self.dirty:
            try:
                await self._save(self.step)
            except SaveError as e:
                self._log.warning("exit_save_failed", error=str(e))
            self.dirty = False

        url = self.resume_url
        try:
            await self.host.copy_to_clipboard(url)
        except Exception as e:
            self._log.warning("clipboard_copy_failed", error=str(e), error_type=type(e).__name__)

        self.close()
        self.host.notify(f"Resume link copied:\n{url}")
        self.host.navigate_home()
        return ActionOutcome.OK

    async def submit(self) -> ActionOutcome:
        """Save the final step and submit the draft.

        The resulting status is whatever the store acknowledges. Failures leave
        the status unchanged and are reported to the user so they can retry.
        """
        outcome = self._editable()
        if outcome != ActionOutcome.OK:
            return outcome

        try:
            if self.step != steps.LAST_STEP:
                raise ValidationBlockedError(self.step, [])
            self._require_can_proceed(self.step)
        except ValidationBlockedError as e:
            self._log.info("submit_blocked", step=self.step, missing=e.missing)
            return ActionOutcome.VALIDATION_BLOCKED

        self._cancel_autosave()
        try:
            await self._save(self.step)
        except SaveError as e:
            self._log.warning("submit_save_failed", error=str(e))
            self._render()
            self.host.notify(SUBMIT_FAILED_MESSAGE)
            return ActionOutcome.SAVE_FAILED

        self._begin_request()
        try:
            record = await self.store.submit(self.draft_id)
        except SubmitError as e:
            self._log.warning("submit_failed", error=str(e))
            self.host.notify(SUBMIT_FAILED_MESSAGE)
            return ActionOutcome.SUBMIT_FAILED
        finally:
            self._end_request()

        self.status = record.status
        if self.status == DraftStatus.SUBMITTED:
            self.close()
        self._log.info("draft_submitted", status=self.status.value)
        self._render()
        return ActionOutcome.OK

    def close(self) -> None:
        """Discard the session: stop the pending autosave timer.

        In-flight requests are left to finish on their own.
        """
        self._cancel_autosave()

    async def wait_for_autosave(self) -> None:
        """Wait for the pending debounce timer and any autosave it started."""
        while True:
            pending = {task for task in self._autosaves if not task.done()}
            if not pending:
                return
            await asyncio.wait(pending)

    # ──────────────────────────────────────────────────────────────────────
    # Internals
    # ──────────────────────────────────────────────────────────────────────

    def _require_can_proceed(self, step: int) -> None:
        missing = steps.missing_fields(self.form, step)
        if missing:
            raise ValidationBlockedError(step, missing)

    def _begin_request(self) -> None:
        self._requests_in_flight += 1
        if self._requests_in_flight == 1:
            self._render()

    def _end_request(self) -> None:
        self._requests_in_flight -= 1
        if self._requests_in_flight == 0:
            self._render()

    async def _save(self, step: int) -> DraftRecord:
        """Patch the current form with ``step``; clear dirty if nothing changed meanwhile.

        Raises:
            SaveError: If the store rejects the patch
        """
        issued_at = self._edit_seq
        body = PatchDraft(data=self.form, step=step)
        self._begin_request()
        try:
            record = await self.store.patch(self.draft_id, body)
        finally:
            self._end_request()
        if self._edit_seq == issued_at:
            self.dirty = False
        return record

    def _schedule_autosave(self) -> None:
        self._cancel_autosave()
        self._timer_generation += 1
        task = asyncio.get_running_loop().create_task(self._autosave_after_quiet(self._timer_generation))
        self._timer = task
        self._autosaves.add(task)
        task.add_done_callback(self._autosaves.discard)

    def _cancel_autosave(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def _autosave_after_quiet(self, generation: int) -> None:
        await asyncio.sleep(self.debounce_seconds)
        if generation != self._timer_generation or self._editable() != ActionOutcome.OK:
            return

        # From here on the request is in flight and must not be cancelled.
        self._timer = None
        try:
            await self._save(self.step)
        except SaveError as e:
            self._log.warning("autosave_failed", error=str(e))
            return
        self._log.debug("autosaved", step=self.step, dirty=self.dirty)
        self._render()

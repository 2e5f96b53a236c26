"""IntakeService: entry points for starting and resuming intakes.

Responsibilities:
- Start: create an empty draft and hand back its resume link
- Resume: build a DraftSession for an id and load it
"""

import structlog

from intake.core.config import Settings, get_settings
from intake.domain.links import build_resume_url
from intake.integrations.draft_store import DraftStore
from intake.schemas.drafts import NewDraft
from intake.session.draft_session import DraftSession
from intake.session.host import SessionHost

logger = structlog.get_logger(__name__)


class IntakeService:
    """Service layer wiring a DraftStore to draft sessions."""

    def __init__(self, store: DraftStore, settings: Settings | None = None):
        """Initialize with a DraftStore.

        Args:
            store: DraftStore implementation (DraftStoreFake for tests, HttpDraftStore for production)
            settings: Settings override, defaults to get_settings()
        """
        self.store = store
        self.settings = settings or get_settings()

    async def start_intake(self) -> NewDraft:
        """Create a new empty draft.

        Returns:
            NewDraft whose resume_url is always set (built from public_base when
            the store does not provide one)

        Raises:
            DraftStoreError: If the draft could not be created
        """
        draft = await self.store.create()
        if not draft.resume_url:
            draft = draft.model_copy(update={"resume_url": build_resume_url(self.settings.public_base, draft.id)})
        logger.info("intake_started", draft_id=draft.id)
        return draft

    async def open_session(self, draft_id: str, host: SessionHost) -> DraftSession:
        """Create a session for ``draft_id`` and load it.

        The returned session is in phase ``failed`` when the draft could not be
        loaded; the host has already been told to navigate home in that case.
        """
        session = DraftSession(
            self.store,
            host,
            debounce_seconds=self.settings.autosave_debounce_seconds,
            public_base=self.settings.public_base,
        )
        await session.load(draft_id)
        return session

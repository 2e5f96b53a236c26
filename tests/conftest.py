"""Shared test fixtures for all test groups."""

import asyncio
import logging

import pytest
import structlog

from intake.integrations.store_fake import DraftStoreFake
from intake.schemas.drafts import FormData
from intake.session.draft_session import DraftSession

DEBOUNCE_SECONDS = 0.01
PUBLIC_BASE = "https://intake.test"
DRAFT_ID = "draft-0001"

COMPLETE_FORM = FormData(
    full_name="Ana Lopez",
    email="ana@x.co",
    main_concern="Trouble sleeping",
    goals="Feel rested",
    background="hi",
)


class HostRecorder:
    """SessionHost double that records every call."""

    def __init__(self, clipboard_error: Exception | None = None):
        self.clipboard_error = clipboard_error
        self.renders = []
        self.messages: list[str] = []
        self.clipboard: list[str] = []
        self.navigations = 0

    def render(self, snapshot) -> None:
        self.renders.append(snapshot)

    def notify(self, message: str) -> None:
        self.messages.append(message)

    def navigate_home(self) -> None:
        self.navigations += 1

    async def copy_to_clipboard(self, text: str) -> None:
        if self.clipboard_error is not None:
            raise self.clipboard_error
        self.clipboard.append(text)

    @property
    def last(self):
        return self.renders[-1]


async def wait_until(predicate, timeout: float = 1.0) -> None:
    """Yield to the event loop until ``predicate()`` holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached before timeout")
        await asyncio.sleep(0.001)


@pytest.fixture(autouse=True)
def _isolate_logging():
    """Undo configure_structlog so each test starts from structlog defaults."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def store():
    """Fresh DraftStoreFake with happy_path scenario (default)."""
    return DraftStoreFake()


@pytest.fixture
def host():
    return HostRecorder()


@pytest.fixture
def make_session(host):
    """Factory for unloaded sessions with a tiny debounce."""

    def _make(store, session_host=None) -> DraftSession:
        return DraftSession(
            store,
            session_host or host,
            debounce_seconds=DEBOUNCE_SECONDS,
            public_base=PUBLIC_BASE,
        )

    return _make


@pytest.fixture
async def session(store, make_session):
    """A session loaded on an empty draft at step 0."""
    store.seed(DRAFT_ID)
    draft_session = make_session(store)
    await draft_session.load(DRAFT_ID)
    yield draft_session
    draft_session.close()


@pytest.fixture
async def final_step_session(store, make_session):
    """A session loaded on step 3 with everything filled except background."""
    store.seed(DRAFT_ID, data=COMPLETE_FORM.merged({"background": ""}), step=3)
    draft_session = make_session(store)
    await draft_session.load(DRAFT_ID)
    yield draft_session
    draft_session.close()

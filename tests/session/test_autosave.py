"""Tests for edit_field and the debounced autosave."""

import asyncio

import pytest

from intake.domain.steps import EMAIL_ERROR
from intake.integrations.store_fake import DraftStoreFake
from intake.schemas.drafts import FormData
from intake.schemas.session import ActionOutcome
from tests.conftest import DEBOUNCE_SECONDS, DRAFT_ID, wait_until

pytestmark = pytest.mark.unit


# ============================================================================
# edit_field
# ============================================================================


async def test_edit_field_merges_and_marks_dirty(session, host):
    result = session.edit_field({"fullName": "Ana"})
    session.edit_field(email="ana@x.co")

    assert result == ActionOutcome.OK
    assert session.form.full_name == "Ana"
    assert session.form.email == "ana@x.co"
    assert session.dirty is True
    assert host.last.form == session.form
    assert host.last.dirty is True


async def test_edit_field_does_not_touch_network_synchronously(session, store):
    session.edit_field(full_name="Ana")

    assert store.patches == []
    assert session.save_in_flight is False


async def test_edit_field_unknown_field_raises(session):
    with pytest.raises(ValueError):
        session.edit_field(phone="555")
    assert session.form == FormData()
    assert session.dirty is False


async def test_email_hint_after_editing_email(session, host):
    assert host.last.field_errors == {}

    session.edit_field(email="bad")
    assert host.last.field_errors == {"email": EMAIL_ERROR}

    session.edit_field(email="ana@x.co")
    assert host.last.field_errors == {}


async def test_proceed_scenario_on_basics(session):
    session.edit_field({"fullName": "Ana"})
    session.edit_field({"email": "bad"})
    assert session.can_proceed(0) is False

    session.edit_field({"email": "ana@x.co"})
    assert session.can_proceed(0) is True


# ============================================================================
# Debounce
# ============================================================================


async def test_burst_of_edits_saves_once_with_latest_values(session, store):
    session.edit_field(full_name="A")
    session.edit_field(full_name="An")
    await asyncio.sleep(0)
    session.edit_field(full_name="Ana", email="ana@x.co")

    await session.wait_for_autosave()

    assert len(store.patches) == 1
    draft_id, body = store.patches[0]
    assert draft_id == DRAFT_ID
    assert body.data.full_name == "Ana"
    assert body.data.email == "ana@x.co"
    assert body.step == 0
    assert session.dirty is False


async def test_separate_bursts_save_separately(session, store):
    session.edit_field(full_name="Ana")
    await session.wait_for_autosave()
    session.edit_field(goals="Rest")
    await session.wait_for_autosave()

    assert len(store.patches) == 2
    assert store.patches[1][1].data.full_name == "Ana"
    assert store.patches[1][1].data.goals == "Rest"


async def test_no_save_before_quiet_interval(store, make_session):
    store.seed(DRAFT_ID)
    session = make_session(store)
    session.debounce_seconds = 0.5
    await session.load(DRAFT_ID)

    session.edit_field(full_name="Ana")
    await asyncio.sleep(DEBOUNCE_SECONDS * 3)

    assert store.patches == []
    session.close()


async def test_save_in_flight_while_store_is_slow(session, store, host):
    store.hold()
    session.edit_field(full_name="Ana")
    await wait_until(lambda: store.patches)

    assert session.save_in_flight is True
    assert host.last.save_label == "Saving…"

    store.release()
    await session.wait_for_autosave()

    assert session.save_in_flight is False
    assert host.last.save_label == "Saved"


async def test_edit_during_in_flight_save_keeps_dirty(session, store):
    store.hold()
    session.edit_field(full_name="Ana")
    await wait_until(lambda: store.patches)

    session.edit_field(goals="Rest")
    session.close()  # drop the follow-up timer so only the first request completes
    store.release()
    await session.wait_for_autosave()

    assert len(store.patches) == 1
    assert session.dirty is True
    assert store.drafts[DRAFT_ID].data.full_name == "Ana"


async def test_autosave_failure_is_silent_and_keeps_dirty(host, make_session):
    store = DraftStoreFake(scenario="save_failure")
    store.seed(DRAFT_ID)
    session = make_session(store)
    await session.load(DRAFT_ID)

    session.edit_field(full_name="Ana")
    await session.wait_for_autosave()

    assert len(store.patches) == 1
    assert session.dirty is True
    assert session.save_in_flight is False
    assert host.messages == []


async def test_close_cancels_pending_autosave(session, store):
    session.edit_field(full_name="Ana")
    session.close()
    await asyncio.sleep(DEBOUNCE_SECONDS * 5)

    assert store.patches == []


async def test_close_does_not_cancel_in_flight_request(session, store):
    store.hold()
    session.edit_field(full_name="Ana")
    await wait_until(lambda: store.patches)

    session.close()
    store.release()
    await session.wait_for_autosave()

    assert store.drafts[DRAFT_ID].data.full_name == "Ana"


async def test_async_context_manager_closes(store, make_session):
    store.seed(DRAFT_ID)
    async with make_session(store) as session:
        await session.load(DRAFT_ID)
        session.edit_field(full_name="Ana")
    await asyncio.sleep(DEBOUNCE_SECONDS * 5)

    assert store.patches == []


async def test_autosave_keeps_stored_keys_beyond_known_fields(store, make_session):
    store.seed(DRAFT_ID, data=FormData.model_validate({"fullName": "Ana", "referralSource": "friend"}))
    session = make_session(store)
    await session.load(DRAFT_ID)

    session.edit_field(goals="Rest")
    await session.wait_for_autosave()

    stored = store.drafts[DRAFT_ID].data
    assert stored.goals == "Rest"
    assert stored.model_extra == {"referralSource": "friend"}
    session.close()

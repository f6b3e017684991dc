"""
Tests for the client session state machine.

Timers run on the ManualScheduler from conftest, so nothing here sleeps.
"""

import asyncio
import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock
from parallel.core.session import ExploreView, Phase, Session, mirror_duration
from parallel.core.timers import AsyncioScheduler
from parallel.errors import (
    GENERIC_NOTICE,
    RATE_LIMIT_NOTICE,
    InvalidInputError,
    InvalidTransitionError,
    RateLimitedError,
)
from parallel.llm.llm_selves import normalize_tool_arguments
from parallel.services.selves_service import SelvesService
from server.config import SessionTimings


TIMINGS = SessionTimings(
    MIRROR_SECONDS_PER_WORD=0.12,
    MIRROR_DWELL_SECONDS=3.5,
    MIRROR_MIN_DWELL_SECONDS=3.5,
    MIRROR_FADE_SECONDS=1.2,
    PORTAL_SECONDS=1.0,
    COLLAPSE_MESSAGE_SECONDS=4.0,
    HIDDEN_REVEAL_SWITCHES=3,
)


@pytest.fixture
def generated(tool_arguments):
    return normalize_tool_arguments(tool_arguments)


@pytest.fixture
def make_session(scheduler):
    def make(generator, notifier=None):
        service = SelvesService(generator=generator, fallback_mirror=False)
        return Session(service=service, scheduler=scheduler, timings=TIMINGS, notifier=notifier)
    return make


@pytest_asyncio.fixture
async def exploring(make_session, generated):
    """A session collapsed onto the analyst, with a hidden self available."""
    session = make_session(AsyncMock(return_value=generated))
    await session.submit("Should I take the new job?")
    session.complete_mirror()
    session.select_persona("analyst")
    return session


class TestMirrorDuration:

    def test_proportional_to_words(self):
        text = " ".join(["word"] * 100)
        assert mirror_duration(text, TIMINGS) == pytest.approx(100 * 0.12 + 3.5 + 1.2)

    def test_empty_mirror_gets_minimum_dwell(self):
        assert mirror_duration("", TIMINGS) == pytest.approx(3.5 + 1.2)

    def test_minimum_dwell_wins_for_short_text(self):
        timings = TIMINGS.model_copy(update={"MIRROR_MIN_DWELL_SECONDS": 10.0})
        assert mirror_duration("Two words", timings) == pytest.approx(10.0 + 1.2)


class TestSubmit:

    @pytest.mark.asyncio
    async def test_success_enters_mirror(self, make_session, generated, scheduler):
        session = make_session(AsyncMock(return_value=generated))
        assert await session.submit("Should I take the new job?") is True

        assert session.phase is Phase.MIRROR
        assert session.source == "remote"
        assert [p.id for p in session.personas] == ["analyst", "rebel", "guardian", "visionary", "realist"]
        assert session.mirror_text == generated.identity_mirror
        [handle] = scheduler.pending()
        assert handle.delay == pytest.approx(mirror_duration(generated.identity_mirror, TIMINGS))

    @pytest.mark.asyncio
    async def test_mirror_timer_advances(self, make_session, generated, scheduler):
        session = make_session(AsyncMock(return_value=generated))
        await session.submit("Should I take the new job?")
        scheduler.fire_all()
        assert session.phase is Phase.SUPERPOSITION

    @pytest.mark.asyncio
    async def test_complete_mirror_cancels_timer(self, make_session, generated, scheduler):
        session = make_session(AsyncMock(return_value=generated))
        await session.submit("Should I take the new job?")
        session.complete_mirror()
        assert session.phase is Phase.SUPERPOSITION
        assert scheduler.pending() == []

    @pytest.mark.asyncio
    async def test_no_mirror_goes_straight_to_superposition(self, make_session, generated):
        generated = generated.model_copy(update={"identity_mirror": ""})
        session = make_session(AsyncMock(return_value=generated))
        await session.submit("Should I take the new job?")
        assert session.phase is Phase.SUPERPOSITION

    @pytest.mark.asyncio
    @pytest.mark.parametrize("mirror", ["   ", "\n\t "])
    async def test_blank_mirror_goes_straight_to_superposition(self, make_session, generated, scheduler, mirror):
        # model_copy skips validation, so the blank text reaches the session as sent
        generated = generated.model_copy(update={"identity_mirror": mirror})
        session = make_session(AsyncMock(return_value=generated))
        await session.submit("Should I take the new job?")
        assert session.phase is Phase.SUPERPOSITION
        assert session.mirror_text == ""
        assert scheduler.pending() == []

    @pytest.mark.asyncio
    async def test_rate_limited_falls_back(self, make_session):
        notifier = MagicMock()
        session = make_session(AsyncMock(side_effect=RateLimitedError()), notifier=notifier)

        await session.submit("Should I take the new job?")

        assert session.phase is Phase.SUPERPOSITION
        assert session.source == "fallback"
        assert len(session.personas) == 5
        assert session.hidden_persona is None
        assert session.notices == [RATE_LIMIT_NOTICE]
        notifier.assert_called_once_with(RATE_LIMIT_NOTICE)

    @pytest.mark.asyncio
    async def test_service_crash_still_falls_back(self, scheduler):
        service = MagicMock()
        service.request_selves = AsyncMock(side_effect=RuntimeError("boom"))
        session = Session(service=service, scheduler=scheduler, timings=TIMINGS)

        await session.submit("Stay or go?")

        assert session.phase is Phase.SUPERPOSITION
        assert session.source == "fallback"
        assert session.notices == [GENERIC_NOTICE]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   "])
    async def test_blank_input_rejected(self, make_session, text):
        generator = AsyncMock()
        session = make_session(generator)
        with pytest.raises(InvalidInputError):
            await session.submit(text)
        assert session.phase is Phase.LANDING
        generator.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_submit_ignored(self, make_session, generated):
        release = asyncio.Event()

        async def generator(user_input):
            await release.wait()
            return generated

        session = make_session(generator)
        first = asyncio.create_task(session.submit("Stay or go?"))
        await asyncio.sleep(0)
        assert session.phase is Phase.PROCESSING

        assert await session.submit("Stay or go? (again)") is False

        release.set()
        assert await first is True
        assert session.user_input == "Stay or go?"

    @pytest.mark.asyncio
    async def test_late_result_after_reset_discarded(self, make_session, generated):
        release = asyncio.Event()

        async def generator(user_input):
            await release.wait()
            return generated

        session = make_session(generator)
        pending = asyncio.create_task(session.submit("Stay or go?"))
        await asyncio.sleep(0)
        session.reset()

        release.set()
        assert await pending is False
        assert session.phase is Phase.LANDING
        assert session.personas == ()

    @pytest.mark.asyncio
    async def test_cancelled_submit_returns_to_landing(self, make_session):
        async def generator(user_input):
            await asyncio.sleep(60)

        session = make_session(generator)
        pending = asyncio.create_task(session.submit("Stay or go?"))
        await asyncio.sleep(0)
        pending.cancel()
        with pytest.raises(asyncio.CancelledError):
            await pending
        assert session.phase is Phase.LANDING


class TestExplore:

    @pytest.mark.asyncio
    async def test_select_collapses(self, exploring, scheduler):
        assert exploring.phase is Phase.EXPLORE
        assert exploring.view is ExploreView.SINGLE
        assert exploring.active_persona.id == "analyst"
        assert exploring.portal_transitioning
        assert exploring.collapse_message_visible
        assert sorted(h.delay for h in scheduler.pending()) == [1.0, 4.0]

        scheduler.fire_all()
        assert not exploring.portal_transitioning
        assert not exploring.collapse_message_visible

    @pytest.mark.asyncio
    async def test_views(self, exploring):
        assert exploring.toggle_timeline() is True
        assert exploring.view is ExploreView.TIMELINE
        assert exploring.toggle_compare() is True
        assert exploring.view is ExploreView.COMPARE
        exploring.toggle_compare()
        exploring.toggle_timeline()
        exploring.view_all()
        assert exploring.view is ExploreView.ALL
        assert exploring.active_persona is None

    @pytest.mark.asyncio
    async def test_view_all_from_superposition(self, make_session, generated):
        session = make_session(AsyncMock(return_value=generated))
        await session.submit("Stay or go?")
        session.complete_mirror()
        session.view_all()
        assert session.phase is Phase.EXPLORE
        assert session.view is ExploreView.ALL

    @pytest.mark.asyncio
    async def test_unknown_persona(self, exploring):
        with pytest.raises(KeyError):
            exploring.switch_persona("trickster")

    @pytest.mark.asyncio
    async def test_switch_to_active_is_noop(self, exploring):
        assert exploring.switch_persona("analyst") is False
        assert exploring.switch_count == 0


class TestHiddenReveal:

    @pytest.mark.asyncio
    async def test_reveal_on_third_switch_only(self, exploring):
        exploring.switch_persona("rebel")
        exploring.switch_persona("guardian")
        assert not exploring.hidden_reveal_visible
        exploring.switch_persona("visionary")
        assert exploring.hidden_reveal_visible
        assert exploring.switch_count == 3

    @pytest.mark.asyncio
    async def test_dismiss_never_refires(self, exploring):
        for persona_id in ("rebel", "guardian", "visionary"):
            exploring.switch_persona(persona_id)
        exploring.dismiss_hidden()
        for persona_id in ("realist", "analyst", "rebel", "guardian"):
            exploring.switch_persona(persona_id)
        assert not exploring.hidden_reveal_visible
        assert exploring.snapshot()["hidden_available"] is True

    @pytest.mark.asyncio
    async def test_accept_appends_once(self, exploring):
        for persona_id in ("rebel", "guardian", "visionary"):
            exploring.switch_persona(persona_id)

        hidden = exploring.accept_hidden()

        assert hidden.id == "hidden"
        assert exploring.personas[-1] == hidden
        assert len(exploring.personas) == 6
        assert not exploring.hidden_reveal_visible
        with pytest.raises(InvalidTransitionError):
            exploring.accept_hidden()
        assert exploring.switch_persona("hidden") is True
        assert len(exploring.personas) == 6

    @pytest.mark.asyncio
    async def test_no_reveal_without_hidden(self, make_session):
        session = make_session(AsyncMock(side_effect=RateLimitedError()))
        await session.submit("Stay or go?")
        session.select_persona("analyst")
        for persona_id in ("rebel", "guardian", "visionary", "realist"):
            session.switch_persona(persona_id)
        assert not session.hidden_reveal_visible


class TestTransitions:

    @pytest.mark.asyncio
    async def test_invalid_triggers(self, make_session, generated):
        session = make_session(AsyncMock(return_value=generated))
        with pytest.raises(InvalidTransitionError):
            session.select_persona("analyst")
        with pytest.raises(InvalidTransitionError):
            session.complete_mirror()
        with pytest.raises(InvalidTransitionError):
            session.dismiss_hidden()

        await session.submit("Stay or go?")
        with pytest.raises(InvalidTransitionError):
            session.toggle_timeline()
        assert await session.submit("Stay or go?") is False

    @pytest.mark.asyncio
    async def test_reset_matches_fresh_session(self, exploring, scheduler):
        for persona_id in ("rebel", "guardian", "visionary"):
            exploring.switch_persona(persona_id)
        exploring.accept_hidden()

        exploring.reset()

        assert exploring.snapshot() == Session(scheduler=scheduler, timings=TIMINGS).snapshot()
        assert scheduler.pending() == []

    @pytest.mark.asyncio
    async def test_stale_timer_ignored(self, make_session, generated, scheduler):
        session = make_session(AsyncMock(return_value=generated))
        await session.submit("Stay or go?")
        [mirror_timer] = scheduler.pending()

        session.reset()
        await session.submit("Another dilemma")
        assert session.phase is Phase.MIRROR

        # A late fire from the superseded session must not advance this one
        mirror_timer.callback()
        assert session.phase is Phase.MIRROR


@pytest.mark.asyncio
async def test_asyncio_scheduler_fires():
    fired = asyncio.Event()
    AsyncioScheduler().call_later(0.01, fired.set)
    await asyncio.wait_for(fired.wait(), timeout=1)

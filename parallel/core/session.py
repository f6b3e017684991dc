"""
Client session state machine.

Sequences one user through the experience:

    landing -> processing -> (mirror)? -> superposition -> explore

and owns the explore sub-views (all, single, timeline, compare) plus the
one-shot hidden-self reveal. Renderers read the state and call the trigger
methods; nothing here draws anything.

Every timer and every in-flight generation is bound to the session epoch.
reset() bumps the epoch, so a late timer or a late generation result from a
superseded session is ignored instead of mutating the fresh one.
"""

import asyncio
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from parallel.core import fallback
from parallel.core.timers import AsyncioScheduler, TimerHandle, TimerScheduler
from parallel.errors import GENERIC_NOTICE, InvalidInputError, InvalidTransitionError
from parallel.models.persona import Persona
from parallel.services.selves_service import GenerationOutcome, SelvesService
from server.config import SessionTimings, config
from server.logging_config import get_logger

logger = get_logger(__name__)


class Phase(str, Enum):
    LANDING = "landing"
    PROCESSING = "processing"
    MIRROR = "mirror"
    SUPERPOSITION = "superposition"
    EXPLORE = "explore"


class ExploreView(str, Enum):
    ALL = "all"
    SINGLE = "single"
    TIMELINE = "timeline"
    COMPARE = "compare"


def mirror_duration(text: str, timings: Optional[SessionTimings] = None) -> float:
    """
    Seconds the identity mirror stays up before auto-advancing.

    Proportional to the word count plus a fixed dwell, never shorter than the
    minimum dwell (so an empty mirror is not a zero-length flash), plus the
    fade-out.
    """
    timings = timings or config.SESSION
    words = len(text.split()) if text else 0
    dwell = max(
        timings.MIRROR_MIN_DWELL_SECONDS,
        words * timings.MIRROR_SECONDS_PER_WORD + timings.MIRROR_DWELL_SECONDS,
    )
    return dwell + timings.MIRROR_FADE_SECONDS


class Session:
    def __init__(
        self,
        service: Optional[SelvesService] = None,
        scheduler: Optional[TimerScheduler] = None,
        timings: Optional[SessionTimings] = None,
        notifier: Optional[Callable[[str], None]] = None,
    ):
        self.service = service or SelvesService()
        self.scheduler = scheduler or AsyncioScheduler()
        self.timings = timings or config.SESSION
        self.notifier = notifier

        self.epoch = 0
        self._timers: Dict[str, TimerHandle] = {}
        self._clear()

    def _clear(self) -> None:
        self.phase = Phase.LANDING
        self.user_input = ""
        self._personas: List[Persona] = []
        self.hidden_persona: Optional[Persona] = None
        self.mirror_text = ""
        self.source: Optional[str] = None
        self.active_id: Optional[str] = None
        self.show_timeline = False
        self.show_compare = False
        self.switch_count = 0
        self.hidden_offered = False
        self.hidden_added = False
        self.hidden_reveal_visible = False
        self.portal_transitioning = False
        self.collapse_message_visible = False
        self.notices: List[str] = []

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def personas(self) -> Tuple[Persona, ...]:
        """The visible persona set, in display order."""
        return tuple(self._personas)

    @property
    def active_persona(self) -> Optional[Persona]:
        if self.active_id is None:
            return None
        return self._find(self.active_id)

    @property
    def view(self) -> Optional[ExploreView]:
        if self.phase is not Phase.EXPLORE:
            return None
        if self.show_compare:
            return ExploreView.COMPARE
        if self.show_timeline:
            return ExploreView.TIMELINE
        if self.active_id is not None:
            return ExploreView.SINGLE
        return ExploreView.ALL

    def snapshot(self) -> Dict[str, Any]:
        """Plain-data view of everything a renderer can observe."""
        view = self.view
        return {
            "phase": self.phase.value,
            "view": view.value if view else None,
            "user_input": self.user_input,
            "persona_ids": [p.id for p in self._personas],
            "active_id": self.active_id,
            "mirror_text": self.mirror_text,
            "source": self.source,
            "switch_count": self.switch_count,
            "hidden_available": self.hidden_persona is not None and not self.hidden_added,
            "hidden_reveal_visible": self.hidden_reveal_visible,
            "portal_transitioning": self.portal_transitioning,
            "collapse_message_visible": self.collapse_message_visible,
            "notices": list(self.notices),
        }

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    async def submit(self, text: str) -> bool:
        """
        Start generation for ``text``.

        Returns False, without doing anything, when a submission is already
        in flight or the session is past landing. Blank text raises
        InvalidInputError and leaves the session in landing.
        """
        if self.phase is not Phase.LANDING:
            logger.debug(f"Ignoring submit in phase {self.phase.value}")
            return False
        if not isinstance(text, str) or not text.strip():
            raise InvalidInputError()

        self.phase = Phase.PROCESSING
        self.user_input = text
        epoch = self.epoch

        try:
            outcome = await self.service.request_selves(text)
        except asyncio.CancelledError:
            if epoch == self.epoch:
                self.phase = Phase.LANDING
            raise
        except Exception as e:
            logger.exception(f"Selves service failed outside its fallback path: {e}")
            outcome = GenerationOutcome(
                personas=fallback.generate(text).personas,
                source="fallback",
                notice=GENERIC_NOTICE,
            )

        if epoch != self.epoch:
            logger.info("Discarding generation result for a superseded session")
            return False

        self._apply(outcome)
        return True

    def _apply(self, outcome: GenerationOutcome) -> None:
        self._personas = list(outcome.personas)
        self.hidden_persona = outcome.hidden_persona
        self.mirror_text = (outcome.mirror_text or "").strip()
        self.source = outcome.source

        if outcome.notice:
            self.notices.append(outcome.notice)
            if self.notifier is not None:
                self.notifier(outcome.notice)

        if self.mirror_text:
            self.phase = Phase.MIRROR
            self._schedule("mirror", mirror_duration(self.mirror_text, self.timings), self._advance_from_mirror)
        else:
            self.phase = Phase.SUPERPOSITION

    def complete_mirror(self) -> None:
        """The mirror display finished; the only early way out of the mirror."""
        self._require(Phase.MIRROR, "complete_mirror")
        self._cancel("mirror")
        self._advance_from_mirror()

    def _advance_from_mirror(self) -> None:
        if self.phase is Phase.MIRROR:
            self.phase = Phase.SUPERPOSITION

    def select_persona(self, persona_id: str) -> None:
        """Collapse the superposition onto one self."""
        self._require(Phase.SUPERPOSITION, "select_persona")
        self._find(persona_id)
        self.active_id = persona_id
        self.phase = Phase.EXPLORE
        self._start_portal()
        self.collapse_message_visible = True
        self._schedule("collapse", self.timings.COLLAPSE_MESSAGE_SECONDS, self._hide_collapse_message)

    def view_all(self) -> None:
        if self.phase is Phase.SUPERPOSITION:
            self.phase = Phase.EXPLORE
        else:
            self._require(Phase.EXPLORE, "view_all")
        self.active_id = None

    def switch_persona(self, persona_id: str) -> bool:
        """
        Make another self active. Returns False when it already was.

        The third switch of the session opens the hidden-self reveal, once,
        provided a hidden self exists and has not been added.
        """
        self._require(Phase.EXPLORE, "switch_persona")
        self._find(persona_id)
        if persona_id == self.active_id:
            return False

        self.active_id = persona_id
        self._start_portal()
        self.switch_count += 1

        if (
            self.switch_count == self.timings.HIDDEN_REVEAL_SWITCHES
            and self.hidden_persona is not None
            and not self.hidden_added
            and not self.hidden_offered
        ):
            self.hidden_offered = True
            self.hidden_reveal_visible = True
            logger.info("Hidden self revealed")
        return True

    def toggle_timeline(self) -> bool:
        self._require(Phase.EXPLORE, "toggle_timeline")
        self.show_timeline = not self.show_timeline
        return self.show_timeline

    def toggle_compare(self) -> bool:
        self._require(Phase.EXPLORE, "toggle_compare")
        self.show_compare = not self.show_compare
        return self.show_compare

    def accept_hidden(self) -> Persona:
        """Add the hidden self to the visible set. It is never removed afterwards."""
        self._require_reveal("accept_hidden")
        if not self.hidden_added:
            self._personas.append(self.hidden_persona)
            self.hidden_added = True
        self.hidden_reveal_visible = False
        return self.hidden_persona

    def dismiss_hidden(self) -> None:
        self._require_reveal("dismiss_hidden")
        self.hidden_reveal_visible = False

    def reset(self) -> None:
        """Back to a fresh landing state. Pending timers and generations are dropped."""
        self.epoch += 1
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()
        self._clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _find(self, persona_id: str) -> Persona:
        for persona in self._personas:
            if persona.id == persona_id:
                return persona
        raise KeyError(f"Unknown persona: {persona_id}")

    def _require(self, phase: Phase, trigger: str) -> None:
        if self.phase is not phase:
            raise InvalidTransitionError(f"{trigger} is not valid in phase {self.phase.value}")

    def _require_reveal(self, trigger: str) -> None:
        if not self.hidden_reveal_visible:
            raise InvalidTransitionError(f"{trigger} requires the hidden-self reveal to be open")

    def _start_portal(self) -> None:
        self.portal_transitioning = True
        self._schedule("portal", self.timings.PORTAL_SECONDS, self._end_portal)

    def _end_portal(self) -> None:
        self.portal_transitioning = False

    def _hide_collapse_message(self) -> None:
        self.collapse_message_visible = False

    def _schedule(self, name: str, delay: float, callback: Callable[[], None]) -> None:
        self._cancel(name)
        epoch = self.epoch

        def fire() -> None:
            if epoch != self.epoch:
                return
            self._timers.pop(name, None)
            callback()

        self._timers[name] = self.scheduler.call_later(delay, fire)

    def _cancel(self, name: str) -> None:
        handle = self._timers.pop(name, None)
        if handle is not None:
            handle.cancel()

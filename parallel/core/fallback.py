"""
Deterministic fallback generator.

Produces a complete, schema-valid five-persona set from the raw input text
with no external dependency. Used whenever the generation service is
unavailable or answers with something unusable.
"""

from typing import Dict, List, NamedTuple

from parallel.core.archetypes import ARCHETYPE_NAMES, myth_for
from parallel.models.persona import Dimension, Persona
from server.config import config


FALLBACK_MIRROR_TEXT = (
    "You appear to be standing between what you have and what you could become. "
    "Not divided, but negotiating between safety and growth."
)


class FallbackResult(NamedTuple):
    personas: List[Persona]
    mirror_text: str


# Free-text templates per dimension. "{snippet}" is the bounded input excerpt.
_TEMPLATES: Dict[Dimension, dict] = {
    Dimension.ANALYST: {
        "traits": ["Methodical", "Data-driven", "Risk-calculating", "Precise"],
        "confidence": 0.87,
        "reasoning": (
            'This version of you approaches "{snippet}..." through pure logic. Every variable '
            "is weighed and every outcome probability-mapped. Emotions are acknowledged, then "
            "set aside as noise in the signal."
        ),
        "action": (
            "Build a decision matrix. List the variables, assign weights, and let the numbers "
            "lead. Talk to three people who know the terrain before committing."
        ),
        "emotion": (
            "Early frustration from delayed gratification, then a settled confidence once the "
            "data confirms a direction."
        ),
        "week": "The spreadsheet exists. Uncertainty shrinks and sleep improves. You feel in control.",
        "month": "The structure has surfaced patterns you could not see before. One option stands out.",
        "year": "The methodical choice held up. You built something durable, and only sometimes wonder about the other road.",
        "why": (
            'Your situation carries real complexity. Beneath "{snippet}..." sits a web of '
            "variables your intuition has noticed but not yet organized. The Analyst wants "
            "structure, not to silence the feeling but to find solid ground while everything "
            "else moves."
        ),
        "costs": (
            "Some truths only show up through experience, not examination. Careful modelling "
            "can read as distance to the people around you. By the time the data gives "
            "permission, the momentum that could have carried you may be gone."
        ),
        "resistance": (
            "Part of you knows not everything meaningful can be measured. You remember times "
            "when overthinking became paralysis and the spreadsheet missed what your gut "
            "already knew."
        ),
        "roadmap": [
            "In the first weeks you make room for clarity. Mapping the decision turns the anxiety of not knowing into the productive tension of analysis.",
            "Over the first months patterns emerge. Conversations move from \"I don't know\" to \"here is what I'm weighing and why\", and people start trusting your process.",
            "Six months in, the framework is second nature. Smaller decisions come faster, and the big one has quietly reshaped itself as the information came in.",
            "One year later the discipline matters more than the choice. You have a working relationship with uncertainty, and \"what if\" feels like curiosity rather than regret.",
        ],
    },
    Dimension.REBEL: {
        "traits": ["Bold", "Unconventional", "Instinctive", "Fearless"],
        "confidence": 0.72,
        "reasoning": (
            'This self looks at "{snippet}..." and laughs. The obvious choice is boring. The '
            "answer worth taking is the one that scares you most."
        ),
        "action": (
            "Burn the safety net. Pick the option that makes your heart race and tell people "
            "before you can take it back."
        ),
        "emotion": (
            "Exhilaration and terror in equal parts. Chaotic first weeks, then fast adaptation."
        ),
        "week": "Everything feels unstable and alive. You sleep less and dream bigger. Friends think you've lost it.",
        "month": "The chaos has settled into openings you did not know existed.",
        "year": "You reinvented yourself. The risk produced a version of you the safe path never could.",
        "why": (
            '"{snippet}..." has been sitting in the waiting room of your mind for too long. '
            "The Rebel reads your hesitation as the weight of every time comfort won over "
            "growth, and something in you is ready to break the pattern."
        ),
        "costs": (
            "Disruption can become a habit. Relationships built on the old you may strain, and "
            "some doors do not reopen on your schedule. In the rush to become someone new you "
            "may stop valuing who you already are."
        ),
        "resistance": (
            "You have paid for impulsive moves before, or watched someone else pay. The "
            "hesitation is not cowardice; it is the memory that some things, once broken, do "
            "not go back together."
        ),
        "roadmap": [
            "In the first weeks a single act of defiance against your own inertia feels like free-fall. The worst cases you imagined turn out to be paper tigers.",
            "Over the first months the chaos finds a rhythm: wilder than before, less predictable, more alive. You learn to tell real concern from projected fear.",
            "Six months in the old patterns are hard to recognize. New challenges appear, and the muscle for risk answers more naturally.",
            "One year later the rebellion has matured. You kept the fire and learned to aim it, and the person you were before looks like a photograph.",
        ],
    },
    Dimension.GUARDIAN: {
        "traits": ["Protective", "Nurturing", "Risk-aware", "Grounded"],
        "confidence": 0.91,
        "reasoning": (
            'This self sees "{snippet}..." through what must be preserved. What do you have '
            "that is worth protecting, and what would you lose if this goes wrong?"
        ),
        "action": (
            "Secure the foundation first. Build a six-month buffer, then explore change in "
            "small increments."
        ),
        "emotion": "Steady calm. No dramatic highs, no devastating lows, and real peace of mind.",
        "week": "Safety nets are in place. The anxiety quiets and you sleep knowing the essentials are covered.",
        "month": "From a secure position you explore options without desperation.",
        "year": "A stable, richer life. Growth inside a protected space compounded quietly.",
        "why": (
            'Beneath the excitement of change there is something you are afraid to lose. '
            '"{snippet}..." is also about protecting what you built and the people who rely '
            "on you. Here caution is love, expressed carefully."
        ),
        "costs": (
            "Protection can turn into a wall that keeps out opportunity along with threat. "
            "Over time small changes feel outsized, and the people you shield may feel "
            "underestimated."
        ),
        "resistance": (
            "You know safety taken far enough is stagnation. Somewhere there is a memory of "
            "playing it safe and losing something you cannot get back."
        ),
        "roadmap": [
            "In the first weeks you take inventory of money, logistics and the relationships that hold you up. Nothing dramatic, just reinforced foundations.",
            "Over the first months the anxiety that brought you here dissolves because the ground feels solid again, and clarity arrives unhurried.",
            "Six months in, stability makes room for a gentler courage. Small experiments are possible because failure is no longer catastrophic.",
            "One year later the change is subtle but real: a quiet confidence that needs no audience, and nothing important lost along the way.",
        ],
    },
    Dimension.VISIONARY: {
        "traits": ["Future-oriented", "Optimistic", "Creative", "Ambitious"],
        "confidence": 0.78,
        "reasoning": (
            'This self zooms out from "{snippet}..." to the ten-year picture. The dilemma is '
            "one pixel on a much larger canvas."
        ),
        "action": (
            "Drop the binary choice. Invent the third option nobody has considered yet."
        ),
        "emotion": "Expansive excitement that borders on euphoria; the challenge becomes fuel.",
        "week": "You reframed the whole situation. What felt like a dilemma now reads as an opening.",
        "month": "The new option is taking shape and others begin to see it too.",
        "year": "You built a path that did not exist before you imagined it.",
        "why": (
            '"{snippet}..." feels artificially constrained. The Visionary suspects the real '
            "answer is not on the menu at all, and that you have been reading someone else's "
            "map."
        ),
        "costs": (
            "The gap between imagining and doing can become a permanent address. People may "
            "tire of the next big thing, and while you build tomorrow, today passes unlived."
        ),
        "resistance": (
            "Not every brilliant idea survives contact with reality, and you have unfinished "
            "visions to prove it. A third option can also be an elegant way to avoid the hard "
            "choice in front of you."
        ),
        "roadmap": [
            "In the first weeks the fork in the road starts to look like open terrain. Notebooks fill up and the dilemma becomes a doorway.",
            "Over the first months the burst of ideas settles around one insight that connects the options you thought were incompatible.",
            "Six months in the vision has tangible form. Setbacks edited the plan without shrinking it.",
            "One year later you have made something that was never in the original choice set, shaped by ambition and by a willingness to be surprised.",
        ],
    },
    Dimension.REALIST: {
        "traits": ["Pragmatic", "Balanced", "Adaptable", "Clear-eyed"],
        "confidence": 0.84,
        "reasoning": (
            'This self sees "{snippet}..." exactly as it is: no romance, no catastrophe. What '
            "are the facts and what is actually at stake?"
        ),
        "action": (
            "Take the next small step. Commit for ninety days, then reassess with real data."
        ),
        "emotion": "Grounded acceptance. Neither excited nor anxious, simply present.",
        "week": "A small, reversible commitment is made. No drama, just motion.",
        "month": "Real data replaced speculation and adjustments are cheap.",
        "year": "A series of pragmatic pivots led somewhere unplanned that fits.",
        "why": (
            'You are tired of the drama of indecision. Anxiety has inflated "{snippet}..." '
            "beyond its real size, and part of you wants permission to stop agonizing and "
            "move."
        ),
        "costs": (
            "Pragmatism can wear away wonder. A life of sensible choices can arrive somewhere "
            "adequate and quietly disappointing, and the small next step never becomes a leap."
        ),
        "resistance": (
            "Part of you finds pragmatism boring, and that part is not wrong. It wants a "
            "decision that means something, not just an adjustment."
        ),
        "roadmap": [
            "In the first weeks you make the smallest possible move, and action dissolves the paralysis indecision created.",
            "Over the first months each step produces real information. Some fears were unfounded, some hopes inflated.",
            "Six months in, enough data points form a pattern. The direction is unexpected but feels right.",
            "One year later the path looks nothing like the plan. It is uniquely yours, and the original dilemma is hard to remember.",
        ],
    },
}


def _excerpt(input_text: str, limit: int) -> str:
    return input_text[:limit]


def _build_persona(dimension: Dimension, snippet: str) -> Persona:
    t = _TEMPLATES[dimension]
    return Persona(
        id=dimension.value,
        archetype_name=ARCHETYPE_NAMES[dimension],
        dimension=dimension,
        mythological_mapping=myth_for(dimension),
        personality_traits=tuple(t["traits"]),
        reasoning_analysis=t["reasoning"].format(snippet=snippet),
        suggested_action=t["action"],
        emotional_prediction=t["emotion"],
        confidence_score=t["confidence"],
        timeline={"week": t["week"], "month": t["month"], "year": t["year"]},
        decision_intelligence={
            "why_this_self": t["why"].format(snippet=snippet),
            "hidden_costs": t["costs"],
            "internal_resistance": t["resistance"],
        },
        future_roadmap="\n\n".join(t["roadmap"]),
    )


def generate(input_text: str) -> FallbackResult:
    """Build the five canonical personas for ``input_text``. Never fails."""
    snippet = _excerpt(input_text or "", config.GENERATION.EXCERPT_CHARS)
    personas = [_build_persona(dimension, snippet) for dimension in Dimension]
    return FallbackResult(personas=personas, mirror_text=FALLBACK_MIRROR_TEXT)

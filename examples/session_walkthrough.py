#!/usr/bin/env python3
"""
Parallel Session Walkthrough
============================

Demonstrates:
1. Submitting a dilemma and waiting for generation (or the fallback)
2. Collapsing onto one self and switching between selves
3. Accepting the hidden self when it is revealed
"""

import asyncio
import sys

from parallel.core.insights import roadmap_stages
from parallel.core.session import Phase, Session
from parallel.services.selves_service import SelvesService
from server.config import config


async def run(dilemma: str) -> None:
    if config.GENERATION.REMOTE_URL:
        print(f"Using remote endpoint: {config.GENERATION.REMOTE_URL}")
    else:
        print(f"Using {config.MACHINE_LEARNING.LLM_SERVICE or 'an unconfigured LLM_SERVICE'} directly")
    service = SelvesService()

    session = Session(service=service, notifier=lambda msg: print(f"[notice] {msg}"))

    print(f"\n1. Submitting: {dilemma!r}")
    await session.submit(dilemma)
    print(f"Phase: {session.phase.value} (source: {session.source})")

    if session.phase is Phase.MIRROR:
        print(f"\nIdentity mirror: {session.mirror_text}")
        session.complete_mirror()

    print("\n2. Selves in superposition:")
    for persona in session.personas:
        print(f"   {persona.mythological_mapping.symbol} {persona.archetype_name} ({persona.confidence_score:.2f})")

    first = session.personas[0]
    session.select_persona(first.id)
    print(f"\nCollapsed onto {first.archetype_name}")
    for stage in roadmap_stages(first):
        print(f"   {stage.label}: {stage.text[:80]}...")

    print("\n3. Switching selves...")
    for persona in session.personas[1:4]:
        session.switch_persona(persona.id)
        print(f"   -> {persona.archetype_name} (switches: {session.switch_count})")
        if session.hidden_reveal_visible:
            hidden = session.accept_hidden()
            print(f"   Hidden self discovered: {hidden.archetype_name}")

    print(f"\nVisible selves: {[p.id for p in session.personas]}")
    session.reset()
    print(f"Session reset, phase: {session.phase.value}")


def main():
    dilemma = " ".join(sys.argv[1:]) or "Should I take the new job?"
    asyncio.run(run(dilemma))


if __name__ == "__main__":
    main()

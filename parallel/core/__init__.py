from .archetypes import MYTH_MAPPINGS, ARCHETYPE_NAMES, DIMENSION_THEMES, myth_for, theme_for
from .fallback import generate, FallbackResult
from .insights import roadmap_stages, contrast_insight, decision_section

__all__ = [
    'MYTH_MAPPINGS',
    'ARCHETYPE_NAMES',
    'DIMENSION_THEMES',
    'myth_for',
    'theme_for',
    'generate',
    'FallbackResult',
    'roadmap_stages',
    'contrast_insight',
    'decision_section',
]

"""
Random source for scoring.

Randomness is part of the scoring model, so it is injected rather than read
from the module-level `random` state. SCORING_RANDOM_SEED pins it for
reproducible runs; unset means a fresh generator seeded from system entropy.
"""
import random

from fastapi import Depends

from app.core.config import Settings, get_settings


def build_rng(seed=None) -> random.Random:
    return random.Random(seed)


def get_rng(settings: Settings = Depends(get_settings)) -> random.Random:
    """FastAPI dependency: one generator per request."""
    return build_rng(settings.scoring_random_seed)

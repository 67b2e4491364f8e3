"""
Ravine carver reproduction for seed searching.

This package reproduces the game's ravine carver exactly (PRNG stream order
and single-precision angle updates) so that ravine positions and depths can
be found from a world seed alone, without generating terrain.
"""

from ravine_finder.carver import (
    NoRavine,
    Ravine,
    init_carver_seed,
    init_ravine,
    simulate_ravine_to_middle,
)
from ravine_finder.java_random import JavaRandom

__version__ = "1.0.0"

__all__ = [
    "JavaRandom",
    "NoRavine",
    "Ravine",
    "init_carver_seed",
    "init_ravine",
    "simulate_ravine_to_middle",
]

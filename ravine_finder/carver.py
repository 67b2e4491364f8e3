"""
Ravine carver - feasibility, starting parameters and midpoint simulation.

Reproduces the game's ravine carver for a single chunk. The PRNG stream must
be consumed in exactly the same order as the game, and angles must be rounded
to single precision at the same points, or results silently diverge.

Typical use::

    ravine = init_ravine(world_seed, chunk_x, chunk_z)
    if ravine.can_spawn:
        simulate_ravine_to_middle(ravine)
        print(ravine.lower_y, ravine.upper_y)
"""

import math
from dataclasses import dataclass, field
from typing import Union

import numpy as np

from ravine_finder.java_random import MASK_64, JavaRandom, to_int32

SPAWN_CHANCE = 0.02
MIN_Y = 1
MAX_Y = 248

# Single precision constants, kept as float32 so arithmetic never widens
_F32_TAU = np.float32(math.pi * 2)
_F32_HALF = np.float32(0.5)
_F32_TWO = np.float32(2.0)
_F32_FOUR = np.float32(4.0)
_F32_PITCH_DECAY = np.float32(0.7)
_F32_SHIFT_GAIN = np.float32(0.05)
_F32_SHIFTER_B_DECAY = np.float32(0.8)
_F32_SHIFTER_A_DECAY = np.float32(0.5)
_F32_ZERO = np.float32(0.0)


@dataclass(frozen=True)
class NoRavine:
    """Negative result: the carver rejected this chunk."""

    world_seed: int
    chunk_x: int
    chunk_z: int

    @property
    def can_spawn(self) -> bool:
        return False


@dataclass
class Ravine:
    """
    Carver state for a chunk that spawns a ravine.

    After init_ravine, position and orientation describe the start of the
    ravine, and x_guess, z_guess, lower_y and upper_y are rough estimates for
    its middle. After simulate_ravine_to_middle, position and orientation
    describe the middle and lower_y/upper_y are accurate. ravine_length,
    vertical_radius_at_center, x_guess and z_guess never change after init.
    """

    world_seed: int
    chunk_x: int
    chunk_z: int
    x: float
    y: float
    z: float
    yaw: np.float32
    pitch: np.float32
    ravine_length: int
    vertical_radius_at_center: float
    x_guess: int
    z_guess: int
    lower_y: int
    upper_y: int
    rng: JavaRandom = field(repr=False, compare=False)

    @property
    def can_spawn(self) -> bool:
        return True


CarverResult = Union[NoRavine, Ravine]


def carver_seed(rng: JavaRandom, world_seed: int, chunk_x: int, chunk_z: int) -> int:
    """Combine the world seed and chunk coordinates into the chunk-local seed."""
    rng.set_seed(world_seed)
    # Left to right: the x factor is drawn before the z factor
    x_factor = rng.next_long()
    z_factor = rng.next_long()
    return ((chunk_x * x_factor) ^ (chunk_z * z_factor) ^ world_seed) & MASK_64


def init_carver_seed(rng: JavaRandom, world_seed: int, chunk_x: int, chunk_z: int) -> None:
    """Seed rng with the carver seed of a chunk."""
    rng.set_seed(carver_seed(rng, world_seed, chunk_x, chunk_z))


def init_ravine(world_seed: int, chunk_x: int, chunk_z: int) -> CarverResult:
    """
    Decide whether a ravine starts in a chunk and derive its starting parameters.

    Args:
        world_seed: 64-bit world seed (signed or unsigned)
        chunk_x: Chunk X coordinate
        chunk_z: Chunk Z coordinate

    Returns:
        NoRavine if the 2% spawn roll fails, otherwise a Ravine positioned at
        the start of its path
    """
    rng = JavaRandom()
    init_carver_seed(rng, world_seed & MASK_64, chunk_x, chunk_z)

    if float(rng.next_float()) > SPAWN_CHANCE:
        return NoRavine(world_seed, chunk_x, chunk_z)

    x = float(chunk_x * 16 + rng.next_int(16))
    y = float(rng.next_int(rng.next_int(40) + 8) + 20)
    # The game adds z in 32-bit int arithmetic, which wraps for huge chunk_z
    z = float(to_int32(chunk_z * 16 + rng.next_int(16)))
    yaw = rng.next_float() * _F32_TAU
    pitch = (rng.next_float() - _F32_HALF) / _F32_FOUR
    first = rng.next_float()
    second = rng.next_float()
    vertical_radius = (1.5 + float((first * _F32_TWO + second) * _F32_TWO)) * 3.0
    ravine_length = 112 - rng.next_int(28)

    # Rough estimate of the middle, before any path simulation
    middle_y = int(y) + int(math.sin(float(pitch)) * ravine_length / 2)
    delta_horizontal = np.float32(math.cos(float(pitch)))
    half_length = ravine_length // 2

    return Ravine(
        world_seed=world_seed,
        chunk_x=chunk_x,
        chunk_z=chunk_z,
        x=x,
        y=y,
        z=z,
        yaw=yaw,
        pitch=pitch,
        ravine_length=ravine_length,
        vertical_radius_at_center=vertical_radius,
        x_guess=int(half_length * math.cos(float(yaw)) * float(delta_horizontal)),
        z_guess=int(half_length * math.sin(float(yaw)) * float(delta_horizontal)),
        lower_y=int(middle_y - vertical_radius),
        upper_y=int(middle_y + vertical_radius + 1),
        rng=rng,
    )


def _align_block_mask_draws(rng: JavaRandom) -> None:
    # The game fills a 256-entry width mask here. Only the stream position
    # matters to us; the values are thrown away.
    for index in range(256):
        if index == 0 or rng.next_int(3) == 0:
            rng.next_float()
            rng.next_float()


def simulate_ravine_to_middle(ravine: CarverResult) -> Ravine:
    """
    Walk a ravine from its start to its middle, in place.

    Updates x, y, z, yaw and pitch to the middle of the ravine and replaces
    the estimated lower_y/upper_y with the bounds at the middle, clamped to
    [1, 248]. The full carve may reach a block or two further.

    Args:
        ravine: Result of init_ravine

    Returns:
        The same Ravine object

    Raises:
        ValueError: If called with a NoRavine result
    """
    if not ravine.can_spawn:
        raise ValueError(
            f"No ravine at chunk ({ravine.chunk_x}, {ravine.chunk_z}) "
            f"for seed {ravine.world_seed}"
        )

    rng = ravine.rng
    rng.set_seed(rng.next_long())
    _align_block_mask_draws(rng)

    shifter_a = _F32_ZERO
    shifter_b = _F32_ZERO
    yaw = ravine.yaw
    pitch = ravine.pitch
    x, y, z = ravine.x, ravine.y, ravine.z

    for _ in range(ravine.ravine_length // 2):
        delta_horizontal = np.float32(math.cos(float(pitch)))
        delta_y = np.float32(math.sin(float(pitch)))
        # Per-step width jitter, unused here
        rng.next_float()
        rng.next_float()

        x += math.cos(float(yaw)) * float(delta_horizontal)
        y += float(delta_y)
        z += math.sin(float(yaw)) * float(delta_horizontal)

        pitch *= _F32_PITCH_DECAY
        pitch += shifter_b * _F32_SHIFT_GAIN
        yaw += shifter_a * _F32_SHIFT_GAIN
        shifter_b *= _F32_SHIFTER_B_DECAY
        shifter_a *= _F32_SHIFTER_A_DECAY
        shifter_b += (rng.next_float() - rng.next_float()) * rng.next_float() * _F32_TWO
        shifter_a += (rng.next_float() - rng.next_float()) * rng.next_float() * _F32_FOUR
        rng.next_int(4)

    ravine.x, ravine.y, ravine.z = x, y, z
    ravine.yaw = yaw
    ravine.pitch = pitch
    ravine.upper_y = min(math.floor(y + ravine.vertical_radius_at_center + 1), MAX_Y)
    ravine.lower_y = max(math.floor(y - ravine.vertical_radius_at_center), MIN_Y)
    return ravine

"""
CubiomesService - biome lookup for candidate ravines using cubiomes

This module answers "which biome is at (x, y, z) in this world?" by calling a
compiled cubiomes CLI tool. Only the search driver uses it; the carver itself
never needs biomes.
"""

import logging
import subprocess
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)

DIM_NETHER = -1
DIM_OVERWORLD = 0
DIM_END = 1


class CubiomesService:
    """
    Service for vanilla-accurate biome lookup using cubiomes.

    The tool is invoked as ``<tool> biome <seed> <dimension> <scale> <x> <y> <z>``
    and prints a single biome ID.
    """

    def __init__(self, seed: int, cubiomes_tool_path: Optional[Path] = None):
        """
        Initialize the cubiomes service.

        Args:
            seed: World seed for generation
            cubiomes_tool_path: Path to cubiomes CLI tool (if available)
        """
        self.seed = seed
        self.cubiomes_tool_path = Path(cubiomes_tool_path) if cubiomes_tool_path else None
        self.tools_available = self._check_cubiomes_availability()
        self._cache: Dict[Tuple[int, int, int, int, int], int] = {}

        logger.info(
            f"CubiomesService initialized with seed={seed}, tools_available={self.tools_available}"
        )

    def _check_cubiomes_availability(self) -> bool:
        """Check if cubiomes tools are available and working."""
        if not self.cubiomes_tool_path or not self.cubiomes_tool_path.exists():
            logger.debug("Cubiomes tool path not found")
            return False

        try:
            result = subprocess.run(
                [str(self.cubiomes_tool_path), "--version"],
                capture_output=True,
                text=True,
                timeout=5,
            )
            return result.returncode == 0
        except (subprocess.TimeoutExpired, subprocess.SubprocessError, FileNotFoundError):
            logger.debug("Cubiomes tool test failed")
            return False

    def biome_at(self, dimension: int, scale: int, x: int, y: int, z: int) -> int:
        """
        Get the biome ID at a position.

        Args:
            dimension: DIM_OVERWORLD, DIM_NETHER or DIM_END
            scale: Horizontal scale of the coordinates (1, 4, 16, 64 or 256)
            x: X coordinate at the given scale
            y: Y coordinate at the given scale
            z: Z coordinate at the given scale

        Returns:
            Biome ID

        Raises:
            RuntimeError: If cubiomes tools are not available or the lookup fails
        """
        if not self.tools_available:
            raise RuntimeError("Cubiomes tools not available - cannot get vanilla biome")

        key = (dimension, scale, x, y, z)
        if key in self._cache:
            return self._cache[key]

        cmd = [
            str(self.cubiomes_tool_path),
            "biome",
            str(self.seed),
            str(dimension),
            str(scale),
            str(x),
            str(y),
            str(z),
        ]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=10)

            if result.returncode != 0:
                raise RuntimeError(f"Cubiomes tool failed: {result.stderr.strip()}")

            biome_id = int(result.stdout.strip())
        except (subprocess.TimeoutExpired, subprocess.SubprocessError, ValueError) as e:
            raise RuntimeError(f"Failed to get biome from cubiomes: {e}") from e

        self._cache[key] = biome_id
        return biome_id

    def biomes_at(
        self, dimension: int, scale: int, positions: Iterable[Tuple[int, int, int]]
    ) -> Dict[Tuple[int, int, int], int]:
        """
        Get biomes for several positions.

        Args:
            dimension: Dimension ID
            scale: Horizontal scale of the coordinates
            positions: (x, y, z) tuples at the given scale

        Returns:
            Dictionary mapping (x, y, z) to biome ID
        """
        return {pos: self.biome_at(dimension, scale, *pos) for pos in positions}

    @property
    def is_available(self) -> bool:
        """Check if cubiomes tools are available."""
        return self.tools_available

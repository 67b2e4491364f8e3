#!/usr/bin/env python3
"""
Ravine seed search

Scans world seeds for ravines whose middle reaches a wanted Y range:
1. Run the carver for every chunk around the origin of each seed
2. Keep ravines whose simulated bounds satisfy the criteria
3. Optionally keep only ravines in wanted biomes (needs the cubiomes CLI)
4. Write the matches to CSV

Usage:
    python -m ravine_finder.search --seed-range 0-100000 --radius 8 --workers 8
    python -m ravine_finder.search --config config.yaml --output matches.csv
"""

import argparse
import csv
import logging
import math
import multiprocessing
import sys
from dataclasses import asdict, dataclass, fields
from itertools import islice
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from tqdm import tqdm

from ravine_finder.biome_service import DIM_OVERWORLD, CubiomesService
from ravine_finder.carver import MAX_Y, MIN_Y, init_ravine, simulate_ravine_to_middle
from ravine_finder.config import load_search_config, parse_world_seed

logger = logging.getLogger(__name__)

SEED_BATCH_PER_WORKER = 256


@dataclass
class SearchCriteria:
    """Inclusive Y bounds a ravine middle must satisfy, plus an optional biome allow-list."""

    min_lower_y: int = MIN_Y
    max_lower_y: int = MAX_Y
    min_upper_y: int = MIN_Y
    max_upper_y: int = MAX_Y
    biomes: Optional[List[int]] = None
    dimension: int = DIM_OVERWORLD
    scale: int = 4
    biome_y: int = 63

    @classmethod
    def from_dict(cls, values: Optional[Dict[str, Any]]) -> "SearchCriteria":
        """Build criteria from a config mapping, rejecting unknown keys."""
        values = dict(values or {})
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown search criteria: {sorted(unknown)}")
        return cls(**values)

    def accepts_bounds(self, lower_y: int, upper_y: int) -> bool:
        return (
            self.min_lower_y <= lower_y <= self.max_lower_y
            and self.min_upper_y <= upper_y <= self.max_upper_y
        )

    def accepts_biome(self, biome: int) -> bool:
        return not self.biomes or biome in self.biomes


@dataclass
class RavineMatch:
    """A ravine that passed the Y criteria, described at its middle."""

    seed: int
    chunk_x: int
    chunk_z: int
    x: float
    y: float
    z: float
    lower_y: int
    upper_y: int
    biome: Optional[int] = None


def evaluate_chunk(
    seed: int, chunk_x: int, chunk_z: int, criteria: SearchCriteria
) -> Optional[RavineMatch]:
    """
    Run the carver for one chunk and test the result against the criteria.

    Returns:
        RavineMatch if a ravine spawns and its middle bounds are accepted, else None
    """
    ravine = init_ravine(seed, chunk_x, chunk_z)
    if not ravine.can_spawn:
        return None

    simulate_ravine_to_middle(ravine)
    if not criteria.accepts_bounds(ravine.lower_y, ravine.upper_y):
        return None

    return RavineMatch(
        seed=seed,
        chunk_x=chunk_x,
        chunk_z=chunk_z,
        x=ravine.x,
        y=ravine.y,
        z=ravine.z,
        lower_y=ravine.lower_y,
        upper_y=ravine.upper_y,
    )


def scan_seed(seed: int, radius: int, criteria: SearchCriteria) -> List[RavineMatch]:
    """Evaluate every chunk in [-radius, radius] x [-radius, radius] for one seed."""
    matches = []
    for chunk_x in range(-radius, radius + 1):
        for chunk_z in range(-radius, radius + 1):
            match = evaluate_chunk(seed, chunk_x, chunk_z, criteria)
            if match is not None:
                matches.append(match)
    return matches


def _scan_seed_job(job: Tuple[int, int, SearchCriteria]) -> List[RavineMatch]:
    seed, radius, criteria = job
    return scan_seed(seed, radius, criteria)


def _seed_count(seeds: Iterable[int]) -> Optional[int]:
    try:
        return len(seeds)  # type: ignore[arg-type]
    except (TypeError, OverflowError):
        return None


def _biome_coordinates(match: RavineMatch, criteria: SearchCriteria) -> Tuple[int, int, int]:
    scale = criteria.scale
    return math.floor(match.x) // scale, criteria.biome_y // scale, math.floor(match.z) // scale


def filter_by_biome(
    matches: List[RavineMatch], criteria: SearchCriteria, cubiomes_tool: Optional[Path]
) -> List[RavineMatch]:
    """
    Keep matches whose middle lies in one of criteria.biomes.

    Raises:
        RuntimeError: If the cubiomes tool is not available
    """
    services: Dict[int, CubiomesService] = {}
    kept = []
    for match in matches:
        service = services.get(match.seed)
        if service is None:
            service = CubiomesService(match.seed, cubiomes_tool)
            if not service.is_available:
                raise RuntimeError(
                    f"Biome filter requested but cubiomes tool is not available: {cubiomes_tool}"
                )
            services[match.seed] = service

        x, y, z = _biome_coordinates(match, criteria)
        match.biome = service.biome_at(criteria.dimension, criteria.scale, x, y, z)
        if criteria.accepts_biome(match.biome):
            kept.append(match)

    logger.info(f"Biome filter kept {len(kept)} of {len(matches)} ravines")
    return kept


def search_seeds(
    seeds: Iterable[int],
    criteria: SearchCriteria,
    radius: int = 4,
    num_workers: int = 1,
    cubiomes_tool: Optional[Path] = None,
) -> List[RavineMatch]:
    """
    Search seeds for ravines satisfying the criteria.

    Args:
        seeds: World seeds to scan
        criteria: Y bounds and optional biome allow-list
        radius: Chunk radius around the origin to scan per seed
        num_workers: Number of worker processes (1 runs in-process)
        cubiomes_tool: Path to the cubiomes CLI, needed only for biome filtering

    Returns:
        Matches ordered by seed, then chunk
    """
    if radius < 0:
        raise ValueError(f"Radius must be non-negative, got {radius}")

    total = _seed_count(seeds)
    matches: List[RavineMatch] = []

    logger.info(
        f"Scanning {total if total is not None else 'a stream of'} seeds, "
        f"{(2 * radius + 1) ** 2} chunks each, with {num_workers} worker(s)"
    )

    if num_workers <= 1:
        jobs = ((seed, radius, criteria) for seed in seeds)
        for job in tqdm(jobs, total=total, desc="Scanning seeds"):
            matches.extend(_scan_seed_job(job))
    else:
        # Pool.imap drains its input eagerly, so seeds are fed in bounded batches
        batch_size = num_workers * SEED_BATCH_PER_WORKER
        seed_iter = iter(seeds)
        with multiprocessing.Pool(processes=num_workers) as pool:
            with tqdm(total=total, desc="Scanning seeds") as progress:
                while True:
                    batch = [(seed, radius, criteria) for seed in islice(seed_iter, batch_size)]
                    if not batch:
                        break
                    chunksize = max(1, len(batch) // (num_workers * 8))
                    for result in pool.imap(_scan_seed_job, batch, chunksize=chunksize):
                        matches.extend(result)
                        progress.update()

    logger.info(f"Found {len(matches)} ravines within Y criteria")

    if criteria.biomes:
        matches = filter_by_biome(matches, criteria, cubiomes_tool)

    return matches


def write_matches_csv(matches: List[RavineMatch], output_path: Path) -> Path:
    """Write matches to a CSV file, one row per ravine."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=[field.name for field in fields(RavineMatch)])
        writer.writeheader()
        for match in matches:
            writer.writerow(asdict(match))
    logger.info(f"Wrote {len(matches)} matches to {output_path}")
    return output_path


def parse_seed_range(seed_range: str) -> Sequence[int]:
    """
    Parse "start-end" (inclusive) or a comma-separated list of seeds; negatives allowed.

    Ranges come back as a lazy range object, so huge ranges cost no memory.
    """
    seed_range = seed_range.strip()
    try:
        if "," not in seed_range and "-" in seed_range[1:]:
            head, _, tail = seed_range[1:].partition("-")
            start, end = int(seed_range[0] + head), int(tail)
            return range(start, end + 1)
        return [parse_world_seed(s) for s in seed_range.split(",") if s.strip()]
    except ValueError as e:
        raise ValueError(f"Invalid seed range: {seed_range!r}") from e


def setup_logging(log_level: str = "INFO") -> None:
    """Configure logging for the search."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _resolve_seeds(seed_range: Optional[str], search_config: Dict[str, Any]) -> Sequence[int]:
    if seed_range:
        return parse_seed_range(seed_range)
    if "seed_range" in search_config:
        return parse_seed_range(str(search_config["seed_range"]))
    if "seed" in search_config:
        return [search_config["seed"]]
    raise ValueError("No seeds given: pass --seed-range or set search.seed_range in the config")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the ravine search."""
    parser = argparse.ArgumentParser(description="Search world seeds for ravines")
    parser.add_argument("--config", type=Path, help="Path to config file")
    parser.add_argument(
        "--seed-range",
        type=str,
        help="Range of seeds (e.g., '0-100000') or comma-separated list (e.g., '1,-2,3')",
    )
    parser.add_argument("--radius", type=int, help="Chunk radius around the origin to scan")
    parser.add_argument("--workers", type=int, help="Number of worker processes")
    parser.add_argument("--output", type=Path, help="CSV file to write matches to")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )

    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    try:
        search_config = load_search_config(args.config) if args.config else {}

        seeds = _resolve_seeds(args.seed_range, search_config)
        criteria = SearchCriteria.from_dict(search_config.get("criteria"))
        radius = args.radius if args.radius is not None else search_config.get("radius", 4)
        workers = (
            args.workers
            if args.workers is not None
            else search_config.get("num_workers", multiprocessing.cpu_count())
        )
        output = args.output or search_config.get("output")
        cubiomes_tool = search_config.get("cubiomes_tool")

        count = _seed_count(seeds)
        more = "..." if count is None or count > 5 else ""
        logger.info(f"Using {count} seeds: {list(seeds[:5])}{more}")

        matches = search_seeds(
            seeds,
            criteria,
            radius=radius,
            num_workers=workers,
            cubiomes_tool=Path(cubiomes_tool) if cubiomes_tool else None,
        )

        for match in matches:
            logger.info(
                f"Seed {match.seed}: chunk ({match.chunk_x}, {match.chunk_z}), "
                f"middle ({match.x:.1f}, {match.y:.1f}, {match.z:.1f}), "
                f"y {match.lower_y}..{match.upper_y}"
            )

        if output:
            write_matches_csv(matches, Path(output))

        logger.info(f"Search completed: {len(matches)} matches")
        return 0
    except Exception as e:
        logger.error(f"Search failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())

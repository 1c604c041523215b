"""
Playable terrain planes: repeated WFC runs until one passes the validity checks.

A plane is accepted when no column is entirely sea (there is always a way
across) and, by default, when it holds a square all-land patch to spawn on.
Every rejected attempt, including one that hit a contradiction, starts over
from a fresh grid. The number of attempts is bounded.
"""
from __future__ import annotations

import logging
import warnings
from collections import Counter
from typing import Tuple

import numpy as np

from tileplane.WFC.patterns import LAND, SEA, mirror_vertically
from tileplane.WFC.TileHandler import TileHandler, normalize_pattern
from tileplane.WFC.waveFunctionCollapse import ContradictionError, waveFunctionCollapse

logger = logging.getLogger(__name__)

NO_SPAWN = (-1, -1)


class GenerationExhausted(RuntimeError):
    """no acceptable plane was produced within the attempt budget"""

    def __init__(self, attempts: int, failures: dict):
        reasons = ", ".join(f"{reason}: {count}" for reason, count in sorted(failures.items()))
        super().__init__(f"no valid plane after {attempts} attempts ({reasons})")
        self.attempts = attempts
        self.failures = dict(failures)


class GeneratedPlane:
    """an accepted plane; unpacks as (plane, spawn), attempts is kept as an attribute"""

    def __init__(self, plane: np.ndarray, spawn: Tuple[int, int], attempts: int):
        self.plane = plane
        self.spawn = spawn
        self.attempts = attempts

    def __iter__(self):
        return iter((self.plane, self.spawn))

    def __repr__(self):
        height, width = self.plane.shape
        return f"GeneratedPlane({width}x{height}, spawn={self.spawn}, attempts={self.attempts})"


def make_rng(rng=None) -> np.random.Generator:
    """accepts None, an integer seed or a numpy Generator"""
    if isinstance(rng, (bool, np.bool_)):
        raise ValueError(f"rng must be None, an int seed or a numpy Generator, got {rng!r}")
    if rng is None or isinstance(rng, (int, np.integer)):
        return np.random.default_rng(rng)
    if isinstance(rng, np.random.Generator):
        return rng
    raise ValueError(f"rng must be None, an int seed or a numpy Generator, got {type(rng).__name__}")


def plane_has_land_path(plane: np.ndarray, sea: str = SEA) -> bool:
    """False if any column consists of sea tiles only"""
    return not bool(np.any(np.all(plane == sea, axis=0)))


def find_spawn_position(plane: np.ndarray, land: str = LAND, size: int = 5) -> Tuple[int, int]:
    """centre (row, col) of the first size x size all-land patch, scanning row-major; (-1, -1) if none"""
    height, width = plane.shape
    is_land = plane == land
    for row in range(height - size + 1):
        for col in range(width - size + 1):
            if is_land[row:row + size, col:col + size].all():
                return row + size // 2, col + size // 2
    return NO_SPAWN


def is_sea(plane: np.ndarray, row: int, col: int, sea: str = SEA) -> bool:
    return bool(plane[row, col] == sea)


def generate(pattern, width: int, height: int, rng=None, **kwargs) -> GeneratedPlane:
    """generate a playable plane from an example pattern

    Args:
        pattern: rows of tile symbols, e.g. ["LLL", "CCC", "SSS"]
        width (int): columns of the output plane
        height (int): rows of the output plane
        rng (optional): None, int seed or np.random.Generator

    Kwargs:
        max_attempts (int): solver runs before giving up. Defaults to 100.
        mirror (bool): allow flipping the pattern upside down. Defaults to True.
        mirror_probability (float): chance of the flip, rolled once per call. Defaults to 0.5.
        require_spawn (bool): reject planes without a spawn patch. Defaults to True.
        spawn_size (int): side of the all-land spawn patch. Defaults to 5.
        land (str): land symbol. Defaults to 'L'.
        sea (str): sea symbol. Defaults to 'S'.
        progress (bool): tqdm bar per attempt. Defaults to False.

    Returns:
        GeneratedPlane: read-only (height, width) plane, spawn (row, col) or (-1, -1), attempts used

    Raises:
        GenerationExhausted: every attempt failed
    """
    max_attempts = kwargs.pop("max_attempts", 100)
    mirror = kwargs.pop("mirror", True)
    mirror_probability = kwargs.pop("mirror_probability", 0.5)
    require_spawn = kwargs.pop("require_spawn", True)
    spawn_size = kwargs.pop("spawn_size", 5)
    land = kwargs.pop("land", LAND)
    sea = kwargs.pop("sea", SEA)
    progress = kwargs.pop("progress", False)
    if kwargs:
        raise TypeError(f"unexpected keyword arguments: {sorted(kwargs)}")

    if width < 1 or height < 1:
        raise ValueError(f"plane must be at least 1x1, got {width}x{height}")
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be positive, got {max_attempts}")
    if spawn_size < 1:
        raise ValueError(f"spawn_size must be positive, got {spawn_size}")

    rng = make_rng(rng)
    rows = normalize_pattern(pattern)
    if mirror and rng.random() < mirror_probability:
        rows = mirror_vertically(rows)
        logger.debug("example pattern mirrored vertically")

    tileHandler = TileHandler.from_pattern(rows)
    if require_spawn and land not in tileHandler.typeList:
        warnings.warn(f"land tile '{land}' does not occur in the example pattern, no plane can hold a spawn patch")

    failures = Counter()
    for attempt in range(1, max_attempts + 1):
        try:
            plane = waveFunctionCollapse(tileHandler, width=width, height=height, rng=rng, progress=progress)
        except ContradictionError as e:
            failures["contradiction"] += 1
            logger.debug("attempt %d: contradiction at cell %d", attempt, e.index)
            continue

        if not plane_has_land_path(plane, sea=sea):
            failures["sea column"] += 1
            logger.debug("attempt %d: a column is all sea", attempt)
            continue

        spawn = find_spawn_position(plane, land=land, size=spawn_size)
        if require_spawn and spawn == NO_SPAWN:
            failures["no spawn"] += 1
            logger.debug("attempt %d: no %dx%d land patch", attempt, spawn_size, spawn_size)
            continue

        logger.info("accepted %dx%d plane after %d attempt(s), spawn at %s", width, height, attempt, spawn)
        plane.flags.writeable = False
        return GeneratedPlane(plane, spawn, attempt)

    raise GenerationExhausted(max_attempts, failures)


def generate_from_config(config, rng=None, progress: bool = False) -> GeneratedPlane:
    return generate(config.pattern, config.width, config.height, rng=rng, progress=progress,
                    **config.generator_kwargs())

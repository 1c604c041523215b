import json
from dataclasses import dataclass, field, fields, asdict
from typing import List

from tileplane.WFC.patterns import COAST_PATTERN, LAND, SEA

DEFAULT_WIDTH = 36
DEFAULT_HEIGHT = 22
DEFAULT_MAX_ATTEMPTS = 100
DEFAULT_MIRROR_PROBABILITY = 0.5
DEFAULT_SPAWN_SIZE = 5


@dataclass
class GeneratorConfig:
    """everything generate() needs besides the random source"""
    pattern: List[str] = field(default_factory=lambda: list(COAST_PATTERN))
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    mirror: bool = True
    mirror_probability: float = DEFAULT_MIRROR_PROBABILITY
    require_spawn: bool = True
    spawn_size: int = DEFAULT_SPAWN_SIZE
    land: str = LAND
    sea: str = SEA

    def generator_kwargs(self) -> dict:
        kwargs = asdict(self)
        for key in ('pattern', 'width', 'height'):
            kwargs.pop(key)
        return kwargs


def load_config(path) -> GeneratorConfig:
    """read a JSON config file; missing keys keep their defaults"""
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object, got {type(data).__name__}")

    known = {f.name for f in fields(GeneratorConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"{path}: unknown config keys {unknown}")
    if 'pattern' in data:
        data['pattern'] = ["".join(row) for row in data['pattern']]
    return GeneratorConfig(**data)

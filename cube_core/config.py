import json
import os
from dataclasses import dataclass, field, fields
from typing import Optional


def _default_table_dir():
    return os.environ.get('CUBE_CORE_TABLE_DIR') or None


@dataclass
class SolverConfig:
    """Solver settings.

    table_dir: directory for the on-disk table cache; None keeps tables in memory
    verify: replay every solution on the facelet model before returning it
    normalize: merge consecutive turns of the same face across phase boundaries
    """
    table_dir: Optional[str] = field(default_factory=_default_table_dir)
    verify: bool = True
    normalize: bool = True

    @classmethod
    def from_dict(cls, cfg: dict) -> 'SolverConfig':
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(cfg) - known)
        if unknown:
            raise ValueError(f"Unknown solver config keys: {', '.join(unknown)}")
        return cls(**cfg)

    @classmethod
    def from_json(cls, path) -> 'SolverConfig':
        with open(path) as f:
            cfg = json.load(f)
        if not isinstance(cfg, dict):
            raise ValueError(f"Solver config {path} must hold a JSON object")
        return cls.from_dict(cfg)

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

SCORING_CONFIG_PATH = Path(__file__).resolve().parents[3] / "config" / "scoring.yaml"


@lru_cache(maxsize=1)
def get_scoring_config() -> dict[str, Any]:
    """Heuristic scoring constants from config/scoring.yaml, read once per process."""
    try:
        raw = SCORING_CONFIG_PATH.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise RuntimeError(f"Scoring config not found at '{SCORING_CONFIG_PATH}'.") from exc

    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise RuntimeError(f"Invalid YAML in scoring config '{SCORING_CONFIG_PATH}': {exc}") from exc

    if not isinstance(parsed, dict):
        raise RuntimeError(f"Scoring config '{SCORING_CONFIG_PATH}' must be a mapping at the top level.")
    return parsed


def get_scoring_value(path: str, default: Any = None) -> Any:
    """Dot-path lookup, e.g. ``fallback.ats.points_per_signal``."""
    node: Any = get_scoring_config()
    for key in filter(None, path.split(".")):
        if not isinstance(node, dict) or key not in node:
            return default
        node = node[key]
    return default if node is get_scoring_config() else node


def get_scoring_int(path: str, default: int) -> int:
    value = get_scoring_value(path, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return int(value)

"""Theme id to display-name lookup loaded from ``data/themes.json``."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from brick_deals.models.product import DEFAULT_THEME

THEMES_FILE_PATH = Path(__file__).resolve().parent.parent.parent / "data" / "themes.json"


@lru_cache(maxsize=1)
def load_theme_names(path: Path = THEMES_FILE_PATH) -> Mapping[int, str]:
    """Load the theme table once as an immutable mapping.

    Raises:
        FileNotFoundError: If the theme table is missing.
    """
    if not path.exists():
        raise FileNotFoundError(f"Theme table not found at: {path}")

    raw = json.loads(path.read_text(encoding="utf-8"))
    return MappingProxyType({int(theme_id): name for theme_id, name in raw.items()})


def theme_name(theme_id: int | None) -> str:
    if theme_id is None:
        return DEFAULT_THEME
    return load_theme_names().get(theme_id, DEFAULT_THEME)

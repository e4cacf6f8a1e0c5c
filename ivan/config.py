"""Project configuration for Ivan.

Directory names and feed settings come from an optional ``ivan.yaml`` at
the project root, layered over ``DEFAULT_CONFIG``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "ivan.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "content_dir": "Content",
    "resources_dir": "Resources",
    "output_dir": "Output",
    "rss_path": "feed.rss",
    "rss_ttl": 250,
    "rss_max_items": 100,
    "description_length": 160,
}


def load_config(project_root: Path) -> dict[str, Any]:
    """Load project configuration from ivan.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.
    """
    config_path = project_root / CONFIG_FILENAME
    config = DEFAULT_CONFIG.copy()
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
            if isinstance(loaded, dict):
                config.update({k: v for k, v in loaded.items() if k in DEFAULT_CONFIG})
    return config

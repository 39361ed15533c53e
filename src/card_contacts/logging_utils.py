from __future__ import annotations

import logging
import os
from typing import Optional

from .config_loader import ParserConfig

LOG_LEVEL_ENV = "CARD_CONTACTS_LOG_LEVEL"


def _resolve_level(level_name: str) -> int:
    """Map a level name (or numeric string) to a logging level, defaulting to INFO."""
    normalized = (level_name or "INFO").strip().upper()
    if normalized.isdigit():
        return int(normalized)
    level = getattr(logging, normalized, logging.INFO)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(config: ParserConfig, level_override: Optional[str] = None) -> None:
    """
    Configure the root logger according to precedence:

    1. ``CARD_CONTACTS_LOG_LEVEL`` environment variable (if set)
    2. ``level_override`` provided by the caller (e.g., CLI flag)
    3. ``config.logging.level`` from the YAML config
    4. Default ``WARNING`` level
    """
    env_level = os.getenv(LOG_LEVEL_ENV)
    effective_level_name = env_level or level_override or config.logging.level or "WARNING"
    level_value = _resolve_level(effective_level_name)

    root_logger = logging.getLogger()
    if root_logger.handlers:
        root_logger.setLevel(level_value)
    else:
        logging.basicConfig(
            level=level_value, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
        )

"""Runtime settings for the planner page.

Values come from the environment:

- ``PLANNER_MODE``: ``two_tier`` (default) or ``single_tier``
- ``LOG_LEVEL``: standard logging level name, ``INFO`` by default
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from planner_core import PlannerConfig, config_for_mode


@dataclass(frozen=True)
class Settings:
    planner_mode: str = "two_tier"
    log_level: str = "INFO"

    @property
    def planner_config(self) -> PlannerConfig:
        return config_for_mode(self.planner_mode)

    @property
    def is_single_tier(self) -> bool:
        return self.planner_config.thresholds == "single_tier"


def load_settings() -> Settings:
    settings = Settings(
        planner_mode=os.environ.get("PLANNER_MODE", "two_tier").strip() or "two_tier",
        log_level=os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )
    # fail at startup on an unknown mode
    config_for_mode(settings.planner_mode)
    return settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()

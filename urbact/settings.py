# urbact/settings.py
"""
Environment configuration and logging setup.
Values come from the process environment, optionally seeded from a .env file.
"""

import os
import sys
from dataclasses import dataclass

from dotenv import load_dotenv
from loguru import logger

load_dotenv()

DEFAULT_CITY = "jaipur"
DEFAULT_REGISTRY = "cities.json"


@dataclass(frozen=True)
class Settings:
    project_id: str
    city: str
    registry_path: str
    log_level: str


def get_settings() -> Settings:
    return Settings(
        project_id=os.environ.get("URBACT_PROJECT_ID", "").strip(),
        city=os.environ.get("URBACT_CITY", DEFAULT_CITY).strip() or DEFAULT_CITY,
        registry_path=os.environ.get("URBACT_REGISTRY", DEFAULT_REGISTRY),
        log_level=os.environ.get("URBACT_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default sink with a single stderr sink at `level`."""
    logger.remove()
    logger.add(sys.stderr, level=level,
               format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {name}:{line} - {message}")

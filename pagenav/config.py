"""Browser configuration and logging setup for drones and the command line."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import yaml

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

BROWSERS = ("chromium", "firefox", "webkit")


@dataclass
class DroneConfig:
    """Settings for launching and driving the browser.

    Attributes:
        browser: Playwright browser type (chromium, firefox or webkit)
        headless: Run without a visible window
        viewport: Page viewport size in pixels
        default_timeout: Default Playwright timeout in milliseconds
        base_dir: Root directory for per-build output directories
        retries: Attempts per edge during traversal
        base_url: Page opened right after the browser starts, if set
    """

    browser: str = "chromium"
    headless: bool = True
    viewport: dict[str, int] = field(default_factory=lambda: {"width": 1280, "height": 800})
    default_timeout: int = 30000
    base_dir: str = "."
    retries: int = 3
    base_url: Optional[str] = None

    def __post_init__(self):
        if self.browser not in BROWSERS:
            raise ValueError(
                f'Unsupported browser "{self.browser}", expected one of: {", ".join(BROWSERS)}'
            )

    def merged(self, **overrides: Any) -> DroneConfig:
        """Copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return dataclasses.replace(self, **changes)


def load_config(path: Union[str, Path]) -> DroneConfig:
    """Load a ``DroneConfig`` from a YAML (or JSON) file.

    Args:
        path: Config file; an empty file yields the defaults

    Returns:
        DroneConfig built from the file contents

    Raises:
        FileNotFoundError: The file does not exist
        ValueError: The file is not a mapping or holds unknown keys
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    known = {config_field.name for config_field in dataclasses.fields(DroneConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config keys in {path}: {', '.join(unknown)}")
    return DroneConfig(**data)


def configure_logging(level: Union[str, int] = "INFO") -> None:
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    logging.basicConfig(level=level, format=LOG_FORMAT)

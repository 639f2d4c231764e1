"""Settings for the script-sources CLI.

Everything the CLI persists lives under one home directory: ``config.yaml``
with the settings below and, unless ``data_file`` points elsewhere, the
``library.yaml`` that backs the storage database.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

HOME_ENV_VAR = "SCRIPT_SOURCES_HOME"
CONFIG_FILENAME = "config.yaml"
LIBRARY_FILENAME = "library.yaml"


def home_dir() -> Path:
    """Return $SCRIPT_SOURCES_HOME, else ~/.script-sources, creating it if needed."""
    override = os.environ.get(HOME_ENV_VAR)
    home = Path(override) if override else Path.home() / ".script-sources"
    home.mkdir(parents=True, exist_ok=True)
    return home


class SourcesConfig(BaseModel):
    """User settings. Unknown keys in the file are ignored."""

    model_config = ConfigDict(extra="ignore")

    data_file: Optional[str] = Field(
        default=None, description="Library file for scripts and folders"
    )
    default_source: str = Field(
        default="my-scripts", description="Source listed by 'files list' when none is given"
    )
    verbose: bool = Field(default=False, description="Debug logging without --verbose")

    @property
    def data_path(self) -> Path:
        """Library file the storage database persists to."""
        if self.data_file:
            return Path(self.data_file).expanduser()
        return home_dir() / LIBRARY_FILENAME

    @classmethod
    def load(cls, path: Path | None = None) -> "SourcesConfig":
        """Read settings from ``path`` (default: <home>/config.yaml).

        A missing file gives the defaults. So does an unreadable or invalid
        one, after a warning, so a broken config never blocks the CLI.
        """
        path = path or home_dir() / CONFIG_FILENAME
        if not path.exists():
            return cls()

        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
            return cls.model_validate(data or {})
        except (OSError, yaml.YAMLError, ValidationError) as e:
            logger.warning(f"Ignoring invalid config {path}: {e}")
            return cls()

    def save(self, path: Path | None = None) -> Path:
        """Write the settings that differ from the defaults.

        Returns:
            The file written.
        """
        path = path or home_dir() / CONFIG_FILENAME
        path.write_text(
            yaml.safe_dump(self.model_dump(exclude_defaults=True), default_flow_style=False),
            encoding="utf-8",
        )
        return path

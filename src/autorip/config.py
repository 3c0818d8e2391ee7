"""Configuration management for AutoRip."""

import re
import shutil
import sys
from pathlib import Path
from typing import Literal

import tomli
from pydantic import BaseModel, Field, field_validator

from autorip.error_handling import ExecutableNotFoundError

# Common MakeMKV install locations, searched after PATH.
PLATFORM_MAKEMKV_PATHS: dict[str, list[Path]] = {
    "win32": [
        Path("C:/Program Files/MakeMKV"),
        Path("C:/Program Files (x86)/MakeMKV"),
    ],
    "linux": [
        Path("/usr/bin"),
        Path("/usr/local/bin"),
        Path("/opt/makemkv/bin"),
    ],
    "darwin": [
        Path("/Applications/MakeMKV.app/Contents/MacOS"),
        Path("/opt/homebrew/bin"),
        Path("/usr/local/bin"),
    ],
}

FAKE_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}(?: \d{2}:\d{2}(?::\d{2})?)?$")


class AutoRipConfig(BaseModel):
    """Main configuration for AutoRip."""

    # Paths
    makemkv_dir: Path | None = None  # None = search PATH, then platform defaults
    movie_rips_dir: Path = Field(default=Path("~/Videos/autorip"))
    log_dir: Path = Field(default=Path("~/.local/share/autorip/logs"))

    # Logging
    file_log_enabled: bool = Field(default=True)  # Save makemkvcon output per disc
    log_time_format: Literal["12hr", "24hr"] = Field(default="12hr")

    # Drives
    auto_load_drives: bool = Field(default=True)
    auto_eject_drives: bool = Field(default=True)
    load_delay: int = Field(default=0, ge=0)  # seconds

    # Mount detection (seconds)
    mount_wait_timeout: int = Field(default=10, ge=0)
    mount_poll_interval: int = Field(default=1, gt=0)

    # Ripping
    rip_all_titles: bool = Field(default=False)
    ripping_mode: Literal["sync", "async"] = Field(default="async")

    # Interface
    repeat_mode: bool = Field(default=True)

    # MakeMKV
    fake_date: str | None = None  # "YYYY-MM-DD" or "YYYY-MM-DD HH:MM[:SS]"

    @field_validator("movie_rips_dir", "log_dir", mode="before")
    @classmethod
    def expand_paths(cls, v: Path | str) -> Path:
        """Expand user home directory in paths."""
        if isinstance(v, str):
            v = Path(v)
        return v.expanduser().resolve()

    @field_validator("makemkv_dir", mode="before")
    @classmethod
    def expand_optional_path(cls, v: Path | str | None) -> Path | None:
        """Treat an empty override as unset."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return Path(v).expanduser()

    @field_validator("fake_date", mode="after")
    @classmethod
    def validate_fake_date(cls, v: str | None) -> str | None:
        """Validate the fake date format."""
        if v is None or not v.strip():
            return None
        v = v.strip()
        if not FAKE_DATE_PATTERN.match(v):
            msg = f"fake_date must look like YYYY-MM-DD or YYYY-MM-DD HH:MM[:SS], got {v!r}"
            raise ValueError(msg)
        return v

    @property
    def executable_name(self) -> str:
        """MakeMKV command-line tool file name for this platform."""
        return "makemkvcon.exe" if sys.platform == "win32" else "makemkvcon"

    @property
    def makemkv_con(self) -> str:
        """Resolved path of the MakeMKV command-line executable."""
        name = self.executable_name

        if self.makemkv_dir is not None:
            candidate = self.makemkv_dir / name
            if candidate.is_file():
                return str(candidate)
            raise ExecutableNotFoundError(name, searched=[self.makemkv_dir])

        found = shutil.which(name)
        if found:
            return found

        searched = PLATFORM_MAKEMKV_PATHS.get(sys.platform, [])
        for directory in searched:
            candidate = directory / name
            if candidate.is_file():
                return str(candidate)

        raise ExecutableNotFoundError(name, searched=searched)

    def ensure_directories(self) -> None:
        """Create required directories if they don't exist."""
        self.movie_rips_dir.mkdir(parents=True, exist_ok=True)
        if self.file_log_enabled:
            self.log_dir.mkdir(parents=True, exist_ok=True)


def load_config(config_path: Path | None = None) -> AutoRipConfig:
    """Load configuration from file or defaults."""
    if config_path is None:
        possible_paths = [
            Path.home() / ".config" / "autorip" / "config.toml",
            Path.cwd() / "autorip.toml",
        ]

        for path in possible_paths:
            if path.exists():
                config_path = path
                break

    if config_path and config_path.exists():
        with open(config_path, "rb") as f:
            config_data = tomli.load(f)
        return AutoRipConfig(**config_data)
    return AutoRipConfig()


def create_sample_config(path: Path) -> None:
    """Create a sample configuration file."""
    sample_config = """# AutoRip Configuration
# =====================

# ============================================================================
# PATHS
# ============================================================================

movie_rips_dir = "~/Videos/autorip"               # Each disc is ripped into its own folder here
log_dir = "~/.local/share/autorip/logs"           # autorip.log and per-disc MakeMKV transcripts
# makemkv_dir = "/opt/makemkv/bin"                # Folder holding makemkvcon (default: search PATH)

# ============================================================================
# LOGGING
# ============================================================================

file_log_enabled = true                           # Save the full MakeMKV output of every disc
log_time_format = "12hr"                          # "12hr" or "24hr" console timestamps

# ============================================================================
# DRIVES
# ============================================================================

auto_load_drives = true                           # Close all trays before detecting discs
auto_eject_drives = true                          # Eject all trays when the batch is done
load_delay = 0                                    # Extra seconds to wait after closing trays

# ============================================================================
# MOUNT DETECTION
# ============================================================================

mount_wait_timeout = 10                           # Seconds to wait for inserted discs to mount (0 = never wait)
mount_poll_interval = 1                           # Seconds between drive checks while waiting

# ============================================================================
# RIPPING
# ============================================================================

rip_all_titles = false                            # true = rip every title, false = longest title only
ripping_mode = "async"                            # "async" = all drives at once, "sync" = one disc at a time

# ============================================================================
# INTERFACE
# ============================================================================

repeat_mode = true                                # Offer another batch after each run

# ============================================================================
# MAKEMKV
# ============================================================================

# fake_date = "2024-01-01 12:00"                  # Date reported to makemkvcon (requires libfaketime)
"""

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        f.write(sample_config)

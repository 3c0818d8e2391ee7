"""Output folder and transcript file helpers."""

import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)

INVALID_TITLE_CHARS = re.compile(r"[\\/:*?<>|'\"]")


def sanitize_title(title: str) -> str:
    """Remove characters that are not allowed in folder names."""
    return INVALID_TITLE_CHARS.sub("", title)


def find_free_folder(root: Path, name: str) -> Path:
    """First of ``name``, ``name-1``, ``name-2``... that does not exist yet.

    This only checks. Two callers that both check before either creates
    will get the same answer.
    """
    candidate = root / name
    if not candidate.exists():
        return candidate

    counter = 1
    while (root / f"{name}-{counter}").exists():
        counter += 1
    return root / f"{name}-{counter}"


def create_unique_folder(root: Path, name: str) -> Path:
    """Create and return a folder under ``root`` that did not exist before.

    Raises FileExistsError if another job created the same folder between
    the check and the create.
    """
    root.mkdir(parents=True, exist_ok=True)
    folder = find_free_folder(root, name)
    folder.mkdir()
    return folder


def unique_log_path(log_dir: Path, name: str) -> Path:
    """Path for a new ``Log-<name>.txt`` transcript that does not overwrite another."""
    base = f"Log-{name}"
    candidate = log_dir / f"{base}.txt"
    if not candidate.exists():
        return candidate

    counter = 1
    while (log_dir / f"{base}-{counter}.txt").exists():
        counter += 1
    return log_dir / f"{base}-{counter}.txt"


def write_log_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)
    logger.info("Full log file written to %s", path)

"""Shared test configuration and fixtures."""

import logging
import sys
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from autorip.cli import cleanup_logging
from autorip.config import AutoRipConfig
from autorip.makemkv.runner import EngineResult, MakeMKVRunner
from autorip.makemkv.session import EngineSession


@pytest.fixture(scope="function", autouse=True)
def cleanup_logging_handlers():
    """Automatically cleanup logging handlers after each test to prevent ResourceWarnings."""
    yield
    cleanup_logging()


@pytest.fixture(scope="function", autouse=True)
def reset_logging():
    """Reset logging configuration after each test."""
    yield
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)
    root_logger.setLevel(logging.WARNING)


@pytest.fixture
def makemkv_dir(tmp_path) -> Path:
    """Directory containing a stand-in makemkvcon file."""
    directory = tmp_path / "makemkv"
    directory.mkdir()
    name = "makemkvcon.exe" if sys.platform == "win32" else "makemkvcon"
    (directory / name).write_text("")
    return directory


@pytest.fixture
def config(tmp_path, makemkv_dir) -> AutoRipConfig:
    """Configuration writing into a temporary directory."""
    return AutoRipConfig(
        makemkv_dir=makemkv_dir,
        movie_rips_dir=tmp_path / "rips",
        log_dir=tmp_path / "logs",
        file_log_enabled=False,
        auto_load_drives=False,
        auto_eject_drives=False,
        mount_wait_timeout=3,
        mount_poll_interval=1,
    )


@pytest.fixture
def session() -> EngineSession:
    return EngineSession()


@pytest.fixture
def runner(config, session) -> MakeMKVRunner:
    """Runner whose process execution is replaced by an AsyncMock."""
    runner = MakeMKVRunner(config, session)
    runner.run = AsyncMock(side_effect=AssertionError("unexpected makemkvcon call"))
    return runner


BLU_RAY_DEVICE = "BD-ROM HL-DT-ST BD-RE  WH16NS40 1.05"
DVD_DEVICE = "DVD+R-DL HL-DT-ST DVDRAM GH24NSD1 LG00"


@pytest.fixture
def engine_result():
    """Factory for captured makemkvcon results."""

    def _make(stdout: str = "", stderr: str = "", returncode: int = 0) -> EngineResult:
        return EngineResult(args=["makemkvcon"], returncode=returncode, stdout=stdout, stderr=stderr)

    return _make


@pytest.fixture
def drv():
    """Factory for DRV robot lines."""

    def _make(index: int, state: int, title: str = "", device: str = DVD_DEVICE) -> str:
        return f'DRV:{index},{state},999,1,"{device}","{title}","/dev/sr{index}"'

    return _make


@pytest.fixture
def tinfo():
    """Factory for TINFO title length lines."""

    def _make(title_index: int, duration: str) -> str:
        return f'TINFO:{title_index},9,0,"{duration}"'

    return _make

"""Tests for makemkvcon invocation."""

from pathlib import Path
from unittest.mock import AsyncMock, Mock, patch

import pytest

from autorip.error_handling import CriticalVersionError, ExecutableNotFoundError
from autorip.makemkv.runner import EngineResult, MakeMKVRunner
from autorip.makemkv.session import EngineSession


def fake_process(stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0):
    proc = Mock()
    proc.returncode = returncode
    proc.communicate = AsyncMock(return_value=(stdout, stderr))
    return proc


class TestCommandArguments:
    """Test robot-mode argument lists."""

    def test_list_drives(self, config):
        assert MakeMKVRunner(config).list_drives_args() == ["-r", "info", "disc:index"]

    def test_disc_info(self, config):
        assert MakeMKVRunner(config).disc_info_args(2) == ["-r", "info", "disc:2"]

    def test_rip_single_title(self, config):
        args = MakeMKVRunner(config).rip_args(1, 3, Path("/rips/Movie"))
        assert args == ["-r", "mkv", "disc:1", "3", str(Path("/rips/Movie"))]

    def test_rip_all_titles(self, config):
        args = MakeMKVRunner(config).rip_args(0, "all", Path("/rips/Movie"))
        assert args[3] == "all"


class TestRun:
    """Test process execution."""

    @pytest.mark.asyncio
    async def test_run_captures_output(self, config):
        runner = MakeMKVRunner(config)
        proc = fake_process(b'DRV:0,2,999,1,"DVD","A","/dev/sr0"\n', b"", 0)

        with patch(
            "autorip.makemkv.runner.asyncio.create_subprocess_exec",
            AsyncMock(return_value=proc),
        ) as mock_exec:
            result = await runner.list_drives()

        cmd = mock_exec.call_args.args
        assert cmd[0] == config.makemkv_con
        assert list(cmd[1:]) == ["-r", "info", "disc:index"]
        assert result.returncode == 0
        assert result.stdout.startswith("DRV:0")

    @pytest.mark.asyncio
    async def test_missing_executable(self, config):
        runner = MakeMKVRunner(config)

        with patch(
            "autorip.makemkv.runner.asyncio.create_subprocess_exec",
            AsyncMock(side_effect=FileNotFoundError("makemkvcon")),
        ):
            with pytest.raises(ExecutableNotFoundError):
                await runner.disc_info(0)

    @pytest.mark.asyncio
    async def test_aborted_session_never_spawns(self, config):
        session = EngineSession()
        session.aborted = True
        runner = MakeMKVRunner(config, session)

        with patch(
            "autorip.makemkv.runner.asyncio.create_subprocess_exec",
            AsyncMock(),
        ) as mock_exec:
            with pytest.raises(CriticalVersionError):
                await runner.rip(0, 1, Path("/tmp/x"))

        mock_exec.assert_not_called()


class TestEngineResult:
    """Test combined output."""

    def test_stdout_only(self):
        assert EngineResult([], 0, "out", "").combined_output == "out"

    def test_with_stderr(self):
        assert EngineResult([], 1, "out", "err").combined_output == "out\nerr"

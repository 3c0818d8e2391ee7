"""Tests for a full ripping batch."""

import os
from unittest.mock import AsyncMock, Mock, patch

import pytest

from autorip.core.workflow import AutoRipWorkflow
from autorip.disc.detector import DetectionResult, ReadyDisc
from autorip.error_handling import (
    CriticalVersionError,
    ExecutableNotFoundError,
    ProtocolError,
)
from autorip.makemkv.runner import MakeMKVRunner
from autorip.rip.orchestrator import RunReport


@pytest.fixture
def detector():
    detector = Mock()
    detector.detect = AsyncMock(return_value=DetectionResult())
    return detector


@pytest.fixture
def orchestrator():
    orchestrator = Mock()
    orchestrator.run = AsyncMock(return_value=RunReport())
    return orchestrator


@pytest.fixture
def drive_control():
    control = Mock()
    control.eject_all = AsyncMock(return_value=1)
    control.load_with_wait = AsyncMock()
    return control


@pytest.fixture
def workflow(config, runner, detector, orchestrator, drive_control):
    config.auto_eject_drives = True
    return AutoRipWorkflow(
        config,
        runner=runner,
        detector=detector,
        orchestrator=orchestrator,
        drive_control=drive_control,
    )


class TestWorkflowRun:
    """Test the batch sequence."""

    @pytest.mark.asyncio
    async def test_no_discs(self, workflow, orchestrator, drive_control):
        report = await workflow.run()

        assert report.total == 0
        orchestrator.run.assert_awaited_once_with([])
        drive_control.eject_all.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_detection_failures_are_reported(self, workflow, detector, orchestrator):
        disc = ReadyDisc(0, "A", "A", "dvd", 1)
        detector.detect.return_value = DetectionResult(discs=[disc], failed_titles=["B"])
        orchestrator.run.return_value = RunReport(succeeded=["A"])

        report = await workflow.run()

        orchestrator.run.assert_awaited_once_with([disc])
        assert report.succeeded == ["A"]
        assert report.failed == ["B"]

    @pytest.mark.asyncio
    async def test_loads_drives_when_enabled(self, workflow, config, drive_control):
        config.auto_load_drives = True
        config.load_delay = 3

        await workflow.run()

        drive_control.load_with_wait.assert_awaited_once_with(3)

    @pytest.mark.asyncio
    async def test_does_not_load_when_disabled(self, workflow, drive_control):
        await workflow.run()

        drive_control.load_with_wait.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_eject_when_disabled(self, workflow, config, drive_control):
        config.auto_eject_drives = False

        await workflow.run()

        drive_control.eject_all.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [CriticalVersionError(), ProtocolError("Invalid MakeMKV drive output format")],
    )
    async def test_fatal_errors_still_eject(self, workflow, detector, drive_control, error):
        detector.detect.side_effect = error

        with pytest.raises(type(error)):
            await workflow.run()

        drive_control.eject_all.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_executable_does_not_touch_drives(
        self, workflow, config, tmp_path, detector, drive_control
    ):
        config.makemkv_dir = tmp_path / "nowhere"
        config.auto_load_drives = True

        with pytest.raises(ExecutableNotFoundError):
            await workflow.run()

        detector.detect.assert_not_called()
        drive_control.load_with_wait.assert_not_called()
        drive_control.eject_all.assert_not_called()

    @pytest.mark.asyncio
    async def test_date_override_active_only_during_run(
        self, workflow, config, detector, monkeypatch
    ):
        monkeypatch.delenv("FAKETIME", raising=False)
        monkeypatch.delenv("DOCKER_CONTAINER", raising=False)
        config.fake_date = "2024-01-01 12:00"
        seen = {}

        async def detect():
            seen["faketime"] = os.environ.get("FAKETIME")
            return DetectionResult()

        detector.detect.side_effect = detect

        await workflow.run()

        assert seen["faketime"] == "@2024-01-01 12:00:00"
        assert "FAKETIME" not in os.environ

    @pytest.mark.asyncio
    async def test_creates_output_directories(self, workflow, config):
        config.file_log_enabled = True

        await workflow.run()

        assert config.movie_rips_dir.is_dir()
        assert config.log_dir.is_dir()

    def test_session_shared_with_runner(self, workflow, runner):
        assert workflow.session is runner.session


class TestWorkflowSession:
    """Test that a version failure stops later engine calls."""

    @pytest.mark.asyncio
    async def test_later_runs_refuse_after_version_error(self, config, runner, engine_result, drive_control):
        runner.run.side_effect = None
        runner.run.return_value = engine_result('MSG:5021,260,0,"Too old","%1"\nDRV:0,2,999,1,"DVD","A","/dev/sr0"')
        workflow = AutoRipWorkflow(config, runner=runner, drive_control=drive_control)

        with pytest.raises(CriticalVersionError):
            await workflow.run()
        assert workflow.session.aborted

        spawn = AsyncMock()
        with patch("autorip.makemkv.runner.asyncio.create_subprocess_exec", spawn):
            with pytest.raises(CriticalVersionError):
                await MakeMKVRunner(config, workflow.session).list_drives()
        spawn.assert_not_called()

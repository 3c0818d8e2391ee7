"""One batch of discs from tray loading to eject."""

import logging

from autorip.config import AutoRipConfig
from autorip.disc.detector import DiscDetector
from autorip.drive.control import DriveControl
from autorip.error_handling import ExecutableNotFoundError
from autorip.makemkv.runner import MakeMKVRunner
from autorip.makemkv.session import EngineSession
from autorip.rip.orchestrator import RipOrchestrator, RunReport
from autorip.system_date import date_override

logger = logging.getLogger(__name__)


class AutoRipWorkflow:
    """Detects, rips and ejects every inserted disc.

    A workflow keeps one MakeMKV session for its lifetime, so repeated
    runs only announce the MakeMKV version once.
    """

    def __init__(
        self,
        config: AutoRipConfig,
        *,
        runner: MakeMKVRunner | None = None,
        detector: DiscDetector | None = None,
        orchestrator: RipOrchestrator | None = None,
        drive_control: DriveControl | None = None,
    ):
        self.config = config
        self.runner = runner or MakeMKVRunner(config, EngineSession())
        self.detector = detector or DiscDetector(config, self.runner)
        self.orchestrator = orchestrator or RipOrchestrator(config, self.runner)
        self.drive_control = drive_control or DriveControl()

    @property
    def session(self) -> EngineSession:
        return self.runner.session

    async def run(self) -> RunReport:
        """Rip all inserted discs and return which succeeded and which failed.

        Errors that abort the run are re-raised after the trays are ejected,
        except a missing MakeMKV executable, which aborts before any drive
        is touched.
        """
        # Fails fast with ExecutableNotFoundError.
        executable = self.config.makemkv_con
        logger.debug("Using %s", executable)
        self.config.ensure_directories()

        with date_override(self.config.fake_date):
            return await self._run()

    async def _run(self) -> RunReport:
        try:
            if self.config.auto_load_drives:
                logger.info("Loading drives before ripping...")
                await self.drive_control.load_with_wait(self.config.load_delay)

            logger.info("Beginning AutoRip... Please Wait.")
            detection = await self.detector.detect()
            report = await self.orchestrator.run(detection.discs)
            report.failed.extend(detection.failed_titles)
        except ExecutableNotFoundError:
            raise
        except Exception:
            logger.error("Critical error during ripping process")
            await self.eject()
            raise

        self.display_results(report)
        await self.eject()
        return report

    def display_results(self, report: RunReport) -> None:
        if not report.total:
            logger.info("No discs were ripped")
            return
        if report.succeeded:
            logger.info(
                "The following titles have been successfully ripped: %s",
                ", ".join(report.succeeded),
            )
        if report.failed:
            logger.info(
                "The following titles failed to rip: %s",
                ", ".join(report.failed),
            )

    async def eject(self) -> None:
        if self.config.auto_eject_drives:
            await self.drive_control.eject_all()

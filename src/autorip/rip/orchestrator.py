"""Running one rip job per disc and collecting the results."""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from autorip.config import AutoRipConfig
from autorip.disc.detector import ReadyDisc
from autorip.disc.title_selector import TitleSelection
from autorip.error_handling import RipJobError
from autorip.makemkv.protocol import is_copy_complete
from autorip.makemkv.runner import EngineResult, MakeMKVRunner
from autorip.rip.filesystem import (
    create_unique_folder,
    unique_log_path,
    write_log_file,
)

logger = logging.getLogger(__name__)


class JobStatus(Enum):
    """Lifecycle of a rip job."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class DiscJob:
    """One disc to rip during a run."""

    drive_index: int
    raw_title: str
    sanitized_title: str
    selection: TitleSelection
    output_dir: Path | None = None
    status: JobStatus = JobStatus.PENDING
    error: str | None = None

    @classmethod
    def from_disc(cls, disc: ReadyDisc) -> "DiscJob":
        return cls(
            drive_index=disc.drive_index,
            raw_title=disc.raw_title,
            sanitized_title=disc.sanitized_title,
            selection=disc.selection,
        )

    def mark(self, status: JobStatus, error: str | None = None) -> None:
        """Set the final status. A job finishes exactly once."""
        if self.status is not JobStatus.PENDING:
            msg = f"Job for {self.sanitized_title} already finished as {self.status.value}"
            raise RuntimeError(msg)
        self.status = status
        self.error = error

    def __str__(self) -> str:
        return f"{self.sanitized_title} (drive {self.drive_index}, title {self.selection})"


@dataclass
class RunReport:
    """Titles that were ripped and titles that failed in one run."""

    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)


class RipOrchestrator:
    """Rips every ready disc, one after another or all at once."""

    def __init__(self, config: AutoRipConfig, runner: MakeMKVRunner):
        self.config = config
        self.runner = runner
        self.jobs: list[DiscJob] = []
        self.report = RunReport()

    async def run(self, discs: list[ReadyDisc]) -> RunReport:
        """Rip ``discs`` according to the configured ripping mode."""
        self.report = RunReport()
        self.jobs = [DiscJob.from_disc(disc) for disc in discs]
        if not self.jobs:
            return self.report

        if self.config.ripping_mode == "sync":
            logger.info("Ripping discs synchronously (one at a time)...")
            for job in self.jobs:
                await self._run_isolated(job)
        else:
            # Every job starts at once; there is no limit on parallel makemkvcon processes.
            logger.info("Ripping discs asynchronously (parallel processing)...")
            await asyncio.gather(*(self._run_isolated(job) for job in self.jobs))

        return self.report

    async def _run_isolated(self, job: DiscJob) -> None:
        try:
            await self.rip_job(job)
        except RipJobError as e:
            logger.error("Unable to rip %s. Try ripping with MakeMKV GUI.", job.sanitized_title)
            if e.details:
                logger.debug("makemkvcon said: %s", e.details)
            self._record(job, JobStatus.FAILED, e.message)
        except Exception as e:
            logger.exception("Error ripping %s", job.sanitized_title)
            self._record(job, JobStatus.FAILED, str(e))
        else:
            logger.info("Done Ripping %s", job.sanitized_title)
            self._record(job, JobStatus.SUCCESS)

    def _record(self, job: DiscJob, status: JobStatus, error: str | None = None) -> None:
        job.mark(status, error)
        if status is JobStatus.SUCCESS:
            self.report.succeeded.append(job.sanitized_title)
        else:
            self.report.failed.append(job.sanitized_title)

    async def rip_job(self, job: DiscJob) -> EngineResult:
        """Rip a single disc; raises RipJobError unless MakeMKV reports completion."""
        job.output_dir = create_unique_folder(self.config.movie_rips_dir, job.sanitized_title)
        logger.info("Ripping Title %s to %s...", job.sanitized_title, job.output_dir)

        result = await self.runner.rip(job.drive_index, job.selection, job.output_dir)

        if self.config.file_log_enabled:
            self._save_transcript(job, result)

        if result.returncode != 0 or result.stderr.strip():
            raise RipJobError(
                job.sanitized_title,
                exit_code=result.returncode or None,
                stderr=result.stderr.strip() or None,
            )

        if not is_copy_complete(result.combined_output):
            raise RipJobError(
                job.sanitized_title,
                details="makemkvcon exited without reporting that the copy completed",
            )

        return result

    def _save_transcript(self, job: DiscJob, result: EngineResult) -> None:
        try:
            path = unique_log_path(self.config.log_dir, job.sanitized_title)
            write_log_file(path, result.combined_output)
        except OSError as e:
            logger.error("Error writing log file for %s: %s", job.sanitized_title, e)

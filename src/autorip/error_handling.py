"""Error hierarchy and user-facing error display for AutoRip."""

import logging
import sys
from enum import Enum
from pathlib import Path

from rich.console import Console

logger = logging.getLogger(__name__)
console = Console()


class ErrorCategory(Enum):
    """Categories of errors for better user experience."""

    CONFIGURATION = "configuration"
    DEPENDENCY = "dependency"
    FILESYSTEM = "filesystem"
    MEDIA = "media"
    EXTERNAL_TOOL = "external_tool"
    PROTOCOL = "protocol"
    SYSTEM = "system"


class AutoRipError(Exception):
    """Base exception for AutoRip with enhanced user experience."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory,
        *,
        solution: str | None = None,
        details: str | None = None,
        recoverable: bool = True,
        log_level: int = logging.ERROR,
        original_error: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.solution = solution
        self.details = details
        self.recoverable = recoverable
        self.log_level = log_level
        self.original_error = original_error

    def display_to_user(self) -> None:
        """Display error to user with helpful context."""
        category_styles = {
            ErrorCategory.CONFIGURATION: ("⚙️", "yellow"),
            ErrorCategory.DEPENDENCY: ("📦", "red"),
            ErrorCategory.FILESYSTEM: ("📁", "red"),
            ErrorCategory.MEDIA: ("💿", "blue"),
            ErrorCategory.EXTERNAL_TOOL: ("🔧", "red"),
            ErrorCategory.PROTOCOL: ("📜", "red"),
            ErrorCategory.SYSTEM: ("💻", "red"),
        }

        emoji, color = category_styles.get(self.category, ("❌", "red"))

        console.print(
            f"\n{emoji} [{color} bold]{self.category.value.title()} Error[/{color} bold]",
        )
        console.print(f"[{color}]{self.message}[/{color}]")

        if self.details:
            console.print(f"\n[dim]Details:[/dim] {self.details}")

        if self.solution:
            console.print(f"\n[green]💡 Solution:[/green] {self.solution}")

        if self.recoverable:
            console.print(
                "\n[dim]This error may be temporary. You can try again.[/dim]",
            )
        else:
            console.print(
                "\n[dim]This error requires intervention before continuing.[/dim]",
            )

        if self.original_error:
            logger.log(
                self.log_level,
                "%s: %s",
                self.category.value,
                self.message,
                exc_info=self.original_error,
            )
        else:
            logger.log(self.log_level, "%s: %s", self.category.value, self.message)


class ConfigurationError(AutoRipError):
    """Configuration-related errors."""

    def __init__(self, message: str, *, config_path: Path | None = None, **kwargs):
        solution = kwargs.pop("solution", None)
        if not solution and config_path:
            solution = f"Check your configuration file at {config_path}"
        super().__init__(
            message,
            ErrorCategory.CONFIGURATION,
            solution=solution,
            **kwargs,
        )


class ExecutableNotFoundError(AutoRipError):
    """The MakeMKV command-line executable could not be resolved."""

    def __init__(self, executable: str, *, searched: list[Path] | None = None, **kwargs):
        message = f"MakeMKV executable '{executable}' could not be found"
        details = kwargs.pop("details", None)
        if details is None and searched:
            details = "Searched: " + ", ".join(str(p) for p in searched)
        solution = kwargs.pop(
            "solution",
            "Install MakeMKV from https://makemkv.com/ or set makemkv_dir in your config",
        )
        super().__init__(
            message,
            ErrorCategory.DEPENDENCY,
            solution=solution,
            details=details,
            recoverable=False,
            **kwargs,
        )
        self.executable = executable


class CriticalVersionError(AutoRipError):
    """MakeMKV reported that the installed version is too old to run."""

    def __init__(self, message: str | None = None, **kwargs):
        solution = kwargs.pop(
            "solution",
            "Update MakeMKV to the latest version from https://makemkv.com/",
        )
        super().__init__(
            message
            or "The installed version of MakeMKV is too old, please update to the latest version",
            ErrorCategory.DEPENDENCY,
            solution=solution,
            recoverable=False,
            **kwargs,
        )


class EngineOutputError(AutoRipError):
    """MakeMKV produced output that cannot be used."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, ErrorCategory.PROTOCOL, **kwargs)


class NoOutputError(EngineOutputError):
    """MakeMKV returned no output at all."""


class ProtocolError(EngineOutputError):
    """MakeMKV output did not contain a single usable record."""


class MediaError(AutoRipError):
    """Media/disc-related errors."""

    def __init__(self, message: str, **kwargs):
        solution = kwargs.pop(
            "solution",
            "Try cleaning the disc or ripping it with the MakeMKV GUI",
        )
        super().__init__(message, ErrorCategory.MEDIA, solution=solution, **kwargs)


class NoTitleFoundError(MediaError):
    """No title with a usable duration was found on a disc."""

    def __init__(self, drive_index: int, **kwargs):
        super().__init__(f"No usable title found on disc in drive {drive_index}", **kwargs)
        self.drive_index = drive_index


class ExternalToolError(AutoRipError):
    """External tool execution errors."""

    def __init__(
        self,
        tool: str,
        exit_code: int | None = None,
        stderr: str | None = None,
        **kwargs,
    ):
        message = kwargs.pop("message", None) or f"{tool} failed"
        if exit_code is not None:
            message += f" with exit code {exit_code}"

        details = kwargs.pop("details", stderr)
        solution = kwargs.pop(
            "solution",
            f"Check {tool} is properly installed and configured",
        )

        super().__init__(
            message,
            ErrorCategory.EXTERNAL_TOOL,
            details=details,
            solution=solution,
            **kwargs,
        )
        self.exit_code = exit_code


class RipJobError(ExternalToolError):
    """A single disc extraction did not complete."""

    def __init__(self, title: str, exit_code: int | None = None, stderr: str | None = None, **kwargs):
        kwargs.setdefault("solution", "Try ripping this disc with the MakeMKV GUI")
        super().__init__(
            "makemkvcon",
            exit_code,
            stderr,
            message=f"Ripping {title} failed",
            **kwargs,
        )
        self.title = title


# Errors that stop a whole run and make the process exit non-zero.
FATAL_ERRORS: tuple[type[AutoRipError], ...] = (
    CriticalVersionError,
    NoOutputError,
    ProtocolError,
    ExecutableNotFoundError,
)


def is_fatal(error: BaseException) -> bool:
    """Return True if the error must abort the run with a non-zero exit."""
    return isinstance(error, FATAL_ERRORS)


def handle_error(
    error: Exception,
    *,
    category: ErrorCategory | None = None,
    **kwargs,
) -> None:
    """Convert generic exceptions to AutoRipError and display to user."""
    if isinstance(error, AutoRipError):
        error.display_to_user()
        return

    if category is None:
        if isinstance(error, FileNotFoundError | PermissionError):
            category = ErrorCategory.FILESYSTEM
        else:
            category = ErrorCategory.SYSTEM

    autorip_error = AutoRipError(
        message=str(error) or "An unexpected error occurred",
        category=category,
        original_error=error,
        **kwargs,
    )
    autorip_error.display_to_user()


def graceful_exit(exit_code: int = 1) -> None:
    """Exit gracefully with helpful message."""
    if exit_code == 0:
        console.print("\n[green]✨ AutoRip completed successfully[/green]")
    else:
        console.print("\n[red]AutoRip encountered errors and had to stop[/red]")
        console.print("[dim]Check the logs above for details on what went wrong[/dim]")
        console.print(
            "[dim]Run 'autorip config validate' to check your configuration[/dim]",
        )

    sys.exit(exit_code)

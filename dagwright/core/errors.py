"""Rust-style error display for dagwright build/translation errors."""

from __future__ import annotations

import inspect
import linecache
import os
import sys
import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Absolute path to the dagwright package directory.
# Used by _find_user_frame to distinguish library frames from user code.
_DAGWRIGHT_PKG_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class ErrorCode(str, Enum):
    """Error codes for build/translation errors.

    Organized by category:
    - E001-E099: Builder validation errors
    - E100-E199: Graph state errors
    - E200-E299: Mapping errors
    - E300-E399: Config errors
    """

    # Builder validation (E001-E099)
    NODE_INVALID_NAME = 'E001'
    ACTION_MISSING_FIELD = 'E002'
    ACTION_INVALID_FIELD = 'E003'
    WORKFLOW_NO_NAME = 'E004'
    WORKFLOW_NO_NODES = 'E005'

    # Graph state (E100-E199)
    BUILDER_ALREADY_BUILT = 'E100'
    ERROR_HANDLER_HAS_EDGES = 'E101'
    ERROR_HANDLER_AS_PARENT = 'E102'
    DUPLICATE_NODE_NAME = 'E103'
    DANGLING_TRANSITION = 'E104'
    INVALID_PARENT = 'E105'
    NODE_CREATED_OUTSIDE_BUILDER = 'E106'
    ERROR_HANDLER_IN_DAG = 'E107'

    # Mapping (E200-E299)
    MAPPING_UNKNOWN_FIELD = 'E200'
    MAPPING_MISSING_REQUIRED = 'E201'
    MAPPING_NO_TARGET = 'E202'
    MAPPING_INCOMPATIBLE_VALUE = 'E203'

    # Config (E300-E399)
    CONFIG_INVALID_NAME = 'E300'
    CONFIG_NAME_CONFLICT = 'E301'


# ANSI color codes
class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = '\033[0m'
    BOLD = '\033[1m'
    RED = '\033[91m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    DIM = '\033[2m'


def _should_use_colors() -> bool:
    """Determine if colors should be used in output."""
    if os.environ.get('DAGWRIGHT_FORCE_COLOR', '').lower() in ('1', 'true', 'yes'):
        return True

    # Check NO_COLOR standard (https://no-color.org/)
    if os.environ.get('NO_COLOR') is not None:
        return False

    return hasattr(sys.stderr, 'isatty') and sys.stderr.isatty()


def _should_show_verbose() -> bool:
    """Determine if verbose output (full traceback) should be shown."""
    return os.environ.get('DAGWRIGHT_VERBOSE', '').lower() in ('1', 'true', 'yes')


def _should_use_plain_errors() -> bool:
    """Determine if plain Python errors should be used instead of Rust-style."""
    return os.environ.get('DAGWRIGHT_PLAIN_ERRORS', '').lower() in ('1', 'true', 'yes')


@dataclass
class SourceLocation:
    """Source code location information."""

    file: str
    line: int

    @classmethod
    def from_frame(cls, frame: Any) -> SourceLocation:
        """Create SourceLocation from a frame object."""
        return cls(
            file=frame.f_code.co_filename,
            line=frame.f_lineno,
        )

    def get_source_line(self) -> str | None:
        """Read the source line from the file."""
        line = linecache.getline(self.file, self.line)
        return line.rstrip('\n') or None

    def format_short(self) -> str:
        """Format as 'file:line'."""
        return f'{self.file}:{self.line}'


@dataclass
class DagwrightError(Exception):
    """Base exception for dagwright build/translation errors.

    Provides Rust-style error formatting with:
    - Error code and category
    - Source location with code snippet
    - Notes and help text
    """

    message: str
    code: ErrorCode | None = None
    location: SourceLocation | None = None
    notes: list[str] = field(default_factory=lambda: [])
    help_text: str | None = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

        # Auto-detect location from call stack if not provided
        if self.location is None:
            user_frame = _find_user_frame()
            if user_frame is not None:
                self.location = SourceLocation.from_frame(user_frame)

    def with_note(self, note: str) -> DagwrightError:
        """Add a note to the error (fluent API)."""
        self.notes.append(note)
        return self

    def with_help(self, help_text: str) -> DagwrightError:
        """Set help text (fluent API)."""
        self.help_text = help_text
        return self

    def format_rust_style(self, use_colors: bool | None = None) -> str:
        """Render as `error[E001]: message`, then location, notes and help."""
        if use_colors is None:
            use_colors = _should_use_colors()
        c = _Colors if use_colors else _NoColors

        code_part = f'[{self.code.value}]' if self.code else ''
        lines = ['', f'{c.BOLD}{c.RED}error{code_part}:{c.RESET} {self.message}']
        if self.location is not None:
            lines.extend(_render_location(self.location, c))
        for note in self.notes:
            first, *rest = note.split('\n')
            lines.append(f'   {c.BLUE}={c.RESET} {c.BOLD}{c.BLUE}note{c.RESET}: {first}')
            lines.extend(f'          {line}' for line in rest)
        if self.help_text:
            lines.append('')
            lines.append(f'   {c.BLUE}={c.RESET} {c.BOLD}{c.GREEN}help{c.RESET}:')
            lines.extend(f'        {line}' for line in self.help_text.split('\n'))
        return '\n'.join(lines)

    def __str__(self) -> str:
        """Plain text rendering, safe for logs and non-terminal contexts."""
        return self.format_rust_style(use_colors=False)


class _NoColors:
    """No-op color codes for non-TTY output."""

    RESET = ''
    BOLD = ''
    RED = ''
    BLUE = ''
    CYAN = ''
    GREEN = ''
    DIM = ''


def _render_location(location: SourceLocation, c: Any) -> list[str]:
    """`--> file:line` plus the offending source line, underlined."""
    lines = [f'  {c.BLUE}-->{c.RESET} {c.CYAN}{location.format_short()}{c.RESET}']
    source_line = location.get_source_line()
    if source_line is None:
        return lines

    line_num = str(location.line)
    gutter = ' ' * len(line_num)
    stripped = source_line.lstrip()
    underline = ' ' * (len(source_line) - len(stripped)) + '^' * len(stripped)
    lines.append(f'   {c.BLUE}{gutter}|{c.RESET}')
    lines.append(f'   {c.BLUE}{line_num}|{c.RESET} {source_line}')
    lines.append(f'   {c.BLUE}{gutter}|{c.RESET} {c.RED}{underline}{c.RESET}')
    return lines


_original_excepthook = sys.excepthook


def _dagwright_excepthook(
    exc_type: type[BaseException],
    exc_value: BaseException,
    exc_tb: Any,
) -> None:
    """Custom exception hook for DagwrightError exceptions."""
    if _should_use_plain_errors():
        _original_excepthook(exc_type, exc_value, exc_tb)
        return

    if isinstance(exc_value, DagwrightError):
        print(exc_value.format_rust_style(), file=sys.stderr)

        if _should_show_verbose():
            print(file=sys.stderr)
            c = _Colors if _should_use_colors() else _NoColors
            print(
                f'{c.DIM}Full traceback (DAGWRIGHT_VERBOSE=1):{c.RESET}',
                file=sys.stderr,
            )
            traceback.print_exception(exc_type, exc_value, exc_tb, file=sys.stderr)
    else:
        _original_excepthook(exc_type, exc_value, exc_tb)


def install_error_handler() -> None:
    """Install the custom exception hook for Rust-style error display."""
    sys.excepthook = _dagwright_excepthook


def uninstall_error_handler() -> None:
    """Restore the original exception hook."""
    sys.excepthook = _original_excepthook


# =============================================================================
# Specific Error Classes
# =============================================================================


@dataclass
class ValidationError(DagwrightError):
    """Raised when a builder holds missing or invalid configuration."""

    pass


@dataclass
class StateError(DagwrightError):
    """Raised when a structural graph invariant is violated."""

    pass


@dataclass
class MappingError(DagwrightError):
    """Raised when a payload field cannot be copied to the target element."""

    field_name: str | None = None


@dataclass
class ConfigurationError(DagwrightError):
    """Raised when translation configuration is invalid."""

    pass


# =============================================================================
# Phase-Gated Error Collection
# =============================================================================


class ValidationReport:
    """Collects multiple DagwrightError instances within a validation phase.

    Formats all collected errors together with a summary line,
    similar to rustc's multi-error output.
    """

    def __init__(self, phase_name: str) -> None:
        self.phase_name: str = phase_name
        self.errors: list[DagwrightError] = []

    def add(self, error: DagwrightError) -> None:
        """Append an error to the report."""
        self.errors.append(error)

    def has_errors(self) -> bool:
        """Return True if any errors were collected."""
        return len(self.errors) > 0

    def format_rust_style(self, use_colors: bool | None = None) -> str:
        """Format all collected errors, then append an aborting summary."""
        if use_colors is None:
            use_colors = _should_use_colors()

        c = _Colors if use_colors else _NoColors
        parts: list[str] = []

        for error in self.errors:
            parts.append(error.format_rust_style(use_colors=use_colors))

        count = len(self.errors)
        parts.append(
            f'\n{c.BOLD}{c.RED}error{c.RESET}: aborting due to {count} previous errors'
        )

        return '\n'.join(parts)

@dataclass
class MultipleValidationErrors(DagwrightError):
    """Wraps a ValidationReport containing 2+ errors.

    Single errors are raised as their original type so that
    `except ValidationError` keeps working.
    """

    report: ValidationReport = field(default_factory=lambda: ValidationReport(''))

    def __post_init__(self) -> None:
        if not self.message:
            count = len(self.report.errors)
            self.message = f'aborting due to {count} previous errors'
        # Location is per-error in the report
        super(DagwrightError, self).__init__(self.message)

    def format_rust_style(self, use_colors: bool | None = None) -> str:
        """Delegate formatting to the underlying report."""
        return self.report.format_rust_style(use_colors=use_colors)

    def __str__(self) -> str:
        return self.format_rust_style(use_colors=False)


def raise_collected(report: ValidationReport) -> None:
    """Raise collected errors.

    - 0 errors: no-op (returns normally)
    - 1 error: raises the original error
    - 2+ errors: raises MultipleValidationErrors wrapping the report
    """
    count = len(report.errors)
    if count == 0:
        return
    if count == 1:
        raise report.errors[0]
    raise MultipleValidationErrors(
        message=f'aborting due to {count} previous errors',
        report=report,
    )


def _find_user_frame() -> Any | None:
    """Find the first frame outside of dagwright internals."""
    frame = inspect.currentframe()
    if frame is None:
        return None

    while frame is not None:
        filename = frame.f_code.co_filename

        # Skip synthetic frames (e.g., <string>, <module>)
        if filename.startswith('<'):
            frame = frame.f_back
            continue

        if (
            not filename.startswith(_DAGWRIGHT_PKG_DIR)
            and '/site-packages/' not in filename
        ):
            return frame

        frame = frame.f_back

    return None

import contextvars
import warnings
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional


_CURRENT_DOCUMENT: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "sbdecode_current_document", default=None
)
_CURRENT_LINE: contextvars.ContextVar[Optional[int]] = contextvars.ContextVar(
    "sbdecode_current_line", default=None
)
_CURRENT_SINK: contextvars.ContextVar[Optional["_DiagnosticSink"]] = contextvars.ContextVar(
    "sbdecode_current_sink", default=None
)


@dataclass(frozen=True)
class Diagnostic:
    """One recoverable problem found while decoding."""

    message: str
    document: Optional[str] = None
    line: Optional[int] = None

    def __str__(self) -> str:
        return _format_with_context(self.message, document=self.document, line=self.line)


class _DiagnosticSink:
    def __init__(self, strict: bool):
        self.strict = strict
        self.diagnostics: List[Diagnostic] = []


def _format_with_context(
    message: str,
    *,
    document: Optional[str] = None,
    line: Optional[int] = None,
) -> str:
    if line is None:
        return message
    if document:
        return f"{message}\nLocation: {document} line {line}"
    return f"{message}\nLocation: line {line}"


class StoryboardError(Exception):
    """Base storyboard decoding error."""


class StoryboardValidationError(StoryboardError):
    """Raised in strict mode when storyboard source violates the format."""

    def __init__(self, diagnostic: Diagnostic):
        super().__init__(str(diagnostic))
        self.diagnostic = diagnostic


class StoryboardWarning(UserWarning):
    """Category for recoverable storyboard diagnostics."""


def report_diagnostic(message: str, *, stacklevel: int = 2) -> Diagnostic:
    """Record a recoverable problem at the current document location.

    The diagnostic is appended to the active collector (if any) and emitted as a
    :class:`StoryboardWarning`. In strict mode it is raised instead.
    """
    diagnostic = Diagnostic(
        message=message,
        document=_CURRENT_DOCUMENT.get(),
        line=_CURRENT_LINE.get(),
    )
    sink = _CURRENT_SINK.get()
    if sink is not None:
        if sink.strict:
            raise StoryboardValidationError(diagnostic)
        sink.diagnostics.append(diagnostic)
    warnings.warn(str(diagnostic), StoryboardWarning, stacklevel=stacklevel + 1)
    return diagnostic


@contextmanager
def collect_diagnostics(*, strict: bool = False) -> Iterator[List[Diagnostic]]:
    """Gather every diagnostic reported inside the block into a list."""
    sink = _DiagnosticSink(strict)
    token = _CURRENT_SINK.set(sink)
    try:
        yield sink.diagnostics
    finally:
        _CURRENT_SINK.reset(token)


@contextmanager
def document_context(document: Optional[str]) -> Iterator[None]:
    token = _CURRENT_DOCUMENT.set(document)
    try:
        yield
    finally:
        _CURRENT_DOCUMENT.reset(token)


@contextmanager
def line_context(line: Optional[int]) -> Iterator[None]:
    token = _CURRENT_LINE.set(line)
    try:
        yield
    finally:
        _CURRENT_LINE.reset(token)

"""Turn extraction errors into structured diagnostics with code frames."""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.text import Text

from gql_extract.core.errors import ErrorKind, ExtractionError, ReadError
from gql_extract.models import Diagnostic, Position, SourceRange

DEFAULT_ERROR_ID = "85915"

_ERROR_IDS = {
    ErrorKind.READ_ERROR: "85913",
    ErrorKind.PARSE_ERROR: "85911",
    ErrorKind.INTERPOLATION_NOT_ALLOWED: "85916",
    ErrorKind.EMPTY_FRAGMENT: "85917",
    ErrorKind.FRAGMENT_SYNTAX: "85918",
    ErrorKind.EXPORT_NOT_ASYNC: "85929",
}

_LINES_ABOVE = 2
_LINES_BELOW = 3
_MARKER_STYLE = "bold red"
_GUTTER_STYLE = "dim"


def _offset_of(text: str, line: int, column: int) -> int:
    lines = text.split("\n")
    return sum(len(lines[i]) + 1 for i in range(min(line - 1, len(lines)))) + column - 1


def loc_in_graphql_to_loc_in_file(text: str, template_start: Position, line: int, column: int) -> Position:
    """Map a 1-based GraphQL location inside a template body to a position in the file."""
    file_line = template_start.line + line - 1
    file_column = (template_start.column - 1 if line == 1 else 0) + column
    return Position(line=file_line, column=file_column, offset=_offset_of(text, file_line, file_column))


def _marker_span(line_number: int, line: str, start: Position, end: Position | None) -> tuple[int, int] | None:
    """Return (first column, caret count) to underline on ``line_number``, or None."""
    end_line = end.line if end is not None else start.line
    if line_number < start.line or line_number > end_line:
        return None
    if end is None:
        return start.column, 1
    if start.line == end.line:
        return start.column, max(end.column - start.column, 1)
    if line_number == start.line:
        return start.column, max(len(line) - start.column + 1, 1)
    if line_number == end_line:
        return 1, max(end.column - 1, 1)
    return 1, max(len(line), 1)


def code_frame(
    text: str,
    start: Position,
    end: Position | None = None,
    message: str | None = None,
    highlight: bool = False,
) -> str:
    lines = text.split("\n")
    end_line = end.line if end is not None else start.line
    first = max(1, start.line - _LINES_ABOVE)
    last = min(len(lines), end_line + _LINES_BELOW)
    width = len(str(last))

    frame = Text()
    message_pending = message
    for number in range(first, last + 1):
        line = lines[number - 1]
        span = _marker_span(number, line, start, end)
        if number > first:
            frame.append("\n")
        frame.append("> " if span is not None else "  ", style=_MARKER_STYLE if span is not None else None)
        frame.append(f"{str(number).rjust(width)} |", style=_GUTTER_STYLE)
        if line:
            frame.append(f" {line}")
        if span is None:
            continue
        column, count = span
        frame.append(f"\n  {' ' * width} |", style=_GUTTER_STYLE)
        frame.append(" " + " " * (column - 1))
        frame.append("^" * count, style=_MARKER_STYLE)
        if message_pending:
            frame.append(f" {message_pending}", style=_MARKER_STYLE)
            message_pending = None

    if not highlight:
        return frame.plain
    buffer = StringIO()
    Console(file=buffer, force_terminal=True, color_system="standard", width=10_000).print(
        frame, end="", soft_wrap=True
    )
    return buffer.getvalue()


def _frame(text: str | None, location: SourceRange | None, highlight: bool, message: str | None = None) -> str | None:
    if text is None or location is None:
        return None
    return code_frame(text, location.start, location.end, message=message, highlight=highlight)


def to_diagnostic(
    error: BaseException,
    text: str | None,
    file_path: str,
    highlight: bool = False,
) -> Diagnostic:
    if not isinstance(error, ExtractionError):
        return Diagnostic(
            error_id=DEFAULT_ERROR_ID,
            kind="unknown",
            file_path=file_path,
            source_message=str(error),
            context={"filePath": file_path},
        )

    kind = error.kind
    error_id = error.error_id or _ERROR_IDS.get(kind, DEFAULT_ERROR_ID)

    if kind is ErrorKind.READ_ERROR:
        cause = error.cause if isinstance(error, ReadError) else error
        return Diagnostic(
            error_id=error_id,
            kind=kind.value,
            file_path=file_path,
            source_message=str(cause),
            context={"filePath": file_path, "error": str(cause)},
        )

    if kind is ErrorKind.PARSE_ERROR:
        return Diagnostic(
            error_id=error_id,
            kind=kind.value,
            file_path=file_path,
            location=error.location,
            code_frame=_frame(text, error.location, highlight),
            context={"filePath": file_path},
        )

    if kind in (ErrorKind.INTERPOLATION_NOT_ALLOWED, ErrorKind.EMPTY_FRAGMENT):
        return Diagnostic(
            error_id=error_id,
            kind=kind.value,
            file_path=file_path,
            location=error.location,
            code_frame=_frame(text, error.location, highlight),
        )

    if kind is ErrorKind.FRAGMENT_SYNTAX:
        source_error = error.source_error
        source_message = source_error.message if source_error is not None else str(error)
        location = error.location
        if text is not None and location is not None and source_error is not None and source_error.locations:
            gql_loc = source_error.locations[0]
            location = SourceRange(
                start=loc_in_graphql_to_loc_in_file(text, location.start, gql_loc.line, gql_loc.column)
            )
        return Diagnostic(
            error_id=error_id,
            kind=kind.value,
            file_path=file_path,
            location=location,
            code_frame=_frame(text, location, highlight, message=source_message),
            source_message=source_message,
        )

    if kind is ErrorKind.EXPORT_NOT_ASYNC:
        location = error.location
        if location is not None:
            location = SourceRange(start=location.start, end=location.start)
        return Diagnostic(
            error_id=error_id,
            kind=kind.value,
            file_path=file_path,
            location=location,
            code_frame=_frame(text, location, highlight),
            context={"exportName": error.export_name},
        )

    return Diagnostic(
        error_id=error_id,
        kind=kind.value,
        file_path=file_path,
        source_message=str(error),
        context={"filePath": file_path},
    )

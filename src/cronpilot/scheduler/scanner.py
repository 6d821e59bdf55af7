"""Discovery of ``@Cron`` annotations in Python source files.

A function or method is annotated by a comment line in the block directly
above its ``def`` (or its decorators), or by a line of its docstring::

    class Reports:
        # Nightly digest
        # @Cron 0 0 2 * * *
        def nightly(self) -> None:
            ...

        def hourly(self) -> None:
            \"\"\"Send the hourly summary.

            @Cron reports.hourly
            \"\"\"

The text after the marker is either a six-field cron expression or a
configuration key that resolves to one.
"""

from __future__ import annotations

import ast
import fnmatch
import io
import logging
import re
import tokenize
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from cronpilot.errors import SourceParseError

logger = logging.getLogger(__name__)

CRON_MARKER = "@Cron"
SOURCE_SUFFIX = ".py"

_MARKER_RE = re.compile(rf"^{re.escape(CRON_MARKER)}(?:\s+(?P<expr>.*))?$")

FunctionNode = ast.FunctionDef | ast.AsyncFunctionDef


@dataclass(frozen=True)
class AnnotationEntry:
    """A schedule expression paired with the name of the function it annotates."""

    cron_expr: str
    handler: str
    source: str = field(default="", compare=False)
    lineno: int = field(default=0, compare=False)


def _match_marker(text: str) -> str | None:
    match = _MARKER_RE.match(text.strip())
    if match is None:
        return None
    return (match.group("expr") or "").strip()


def _iter_functions(body: Sequence[ast.stmt]) -> Iterator[FunctionNode]:
    """Yield functions declared in a module or class body, descending into classes."""
    for node in body:
        if isinstance(node, FunctionNode):
            yield node
        elif isinstance(node, ast.ClassDef):
            yield from _iter_functions(node.body)


def _leading_comments(node: FunctionNode, lines: list[str]) -> list[tuple[int, str]]:
    """Return the contiguous ``#`` comment block above a function, top-down."""
    first = min([node.lineno, *(d.lineno for d in node.decorator_list)])
    comments: list[tuple[int, str]] = []
    index = first - 2
    while index >= 0:
        stripped = lines[index].strip()
        if not stripped.startswith("#"):
            break
        comments.append((index + 1, stripped.lstrip("#").strip()))
        index -= 1
    comments.reverse()
    return comments


def _docstring_lines(node: FunctionNode) -> list[tuple[int, str]]:
    # Uncleaned, so that line offsets match the source
    docstring = ast.get_docstring(node, clean=False)
    if not docstring:
        return []
    start = node.body[0].lineno
    return [(start + offset, line) for offset, line in enumerate(docstring.split("\n"))]


def _source_lines(source: str) -> list[str]:
    """Split source on the line endings the tokenizer counts, and no others."""
    return source.replace("\r\n", "\n").replace("\r", "\n").split("\n")


def parse_cron_source(source: str, filename: str = "<string>") -> list[AnnotationEntry]:
    """Extract ``@Cron`` annotations from Python source text.

    Args:
        source: Python source code.
        filename: Name used in entries and error messages.

    Returns:
        One entry per ``@Cron`` line, in source order.

    Raises:
        SourceParseError: If the source is not valid Python.
    """
    try:
        tree = ast.parse(source, filename=filename)
    except SyntaxError as e:
        raise SourceParseError(filename, e.msg, e.lineno) from e
    except ValueError as e:
        raise SourceParseError(filename, str(e)) from e

    lines = _source_lines(source)
    entries: list[AnnotationEntry] = []

    for node in _iter_functions(tree.body):
        for lineno, text in [*_leading_comments(node, lines), *_docstring_lines(node)]:
            expr = _match_marker(text)
            if expr is None:
                continue
            entries.append(
                AnnotationEntry(
                    cron_expr=expr,
                    handler=node.name,
                    source=filename,
                    lineno=lineno,
                )
            )

    return entries


def parse_cron_from_file(path: Path | str) -> list[AnnotationEntry]:
    """Extract ``@Cron`` annotations from a Python source file.

    Raises:
        SourceParseError: If the file cannot be read or parsed.
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise SourceParseError(str(path), str(e)) from e

    # Honour a BOM or PEP 263 coding cookie the way the interpreter does
    try:
        encoding, _ = tokenize.detect_encoding(io.BytesIO(data).readline)
        source = data.decode(encoding)
    except SyntaxError as e:
        raise SourceParseError(str(path), e.msg or str(e), e.lineno) from e
    except (LookupError, UnicodeDecodeError) as e:
        raise SourceParseError(str(path), str(e)) from e

    return parse_cron_source(source, filename=str(path))


def _is_excluded(name: str, exclude: Sequence[str]) -> bool:
    return any(fnmatch.fnmatch(name, pattern) for pattern in exclude)


def iter_annotated_files(
    root: Path | str,
    exclude: Sequence[str] = (),
) -> Iterator[tuple[Path, list[AnnotationEntry]]]:
    """Walk a directory tree depth-first, yielding annotations per source file.

    The source files directly under a directory are yielded before any of its
    subdirectories is visited. A directory that cannot be listed is logged
    and skipped along with everything below it.

    Args:
        root: Directory to walk.
        exclude: Glob patterns of directory names to skip.

    Yields:
        Tuples of (file path, entries found in that file).

    Raises:
        SourceParseError: If a source file cannot be parsed.
    """
    root = Path(root)
    try:
        children = sorted(root.iterdir())
    except OSError as e:
        logger.warning(f"Failed to scan directory {root}: {e}")
        return

    files = [p for p in children if p.suffix == SOURCE_SUFFIX and p.is_file()]
    subdirs = [p for p in children if p.is_dir() and not _is_excluded(p.name, exclude)]

    for path in files:
        yield path, parse_cron_from_file(path)

    for subdir in subdirs:
        yield from iter_annotated_files(subdir, exclude)


def scan_dirs(
    dirs: Sequence[Path | str],
    exclude: Sequence[str] = (),
) -> list[AnnotationEntry]:
    """Collect every annotation found under the given directories.

    Raises:
        SourceParseError: If a source file cannot be parsed.
    """
    entries: list[AnnotationEntry] = []
    for root in dirs:
        for _path, found in iter_annotated_files(root, exclude):
            entries.extend(found)
    return entries

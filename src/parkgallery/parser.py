# Copyright (c) Syntropy Systems
"""Reading and parsing of uploaded result files."""
from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Union, cast

from pydantic import ValidationError

from parkgallery.models.render import ParseFailure
from parkgallery.models.result import UNKNOWN_MODEL, ResultFile, ResultRecord
from parkgallery.models.scenario import InvalidLayoutError, ParkLayout
from parkgallery.signature import normalize_removals

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from parkgallery.models.base import JSONValue

logger = logging.getLogger(__name__)

JSON_SUFFIX = ".json"

RawContent = Union[str, bytes, dict[str, object]]


class ResultParseError(ValueError):
    """Raised when a single result file cannot be turned into a record."""

    def __init__(self, source_file: str, reason: str) -> None:
        super().__init__(f"{source_file}: {reason}")
        self.source_file = source_file
        self.reason = reason


class NoResultFilesError(ValueError):
    """Raised when a batch contains no JSON result files at all."""


def display_stem(filename: str) -> str:
    """Strip the ``.json`` extension from a file name."""
    if filename.endswith(JSON_SUFFIX):
        return filename[: -len(JSON_SUFFIX)]
    return filename


def _raw_removals(value: JSONValue) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ",".join(str(item) for item in value)
    return str(value)


def parse_result(
    content: RawContent,
    source_file: str,
    batch_index: int = 0,
) -> ResultRecord:
    """Parse one result file into a normalized record.

    ``scenario.trees`` may be an embedded layout object or a JSON-encoded
    string of one.

    Raises:
        ResultParseError: if the file or its scenario layout is malformed.

    """
    if isinstance(content, (str, bytes)):
        try:
            data: object = json.loads(content)
        except (ValueError, RecursionError) as e:
            reason = e.msg if isinstance(e, json.JSONDecodeError) else str(e)
            raise ResultParseError(source_file, f"invalid JSON: {reason}") from e
    else:
        data = content

    if not isinstance(data, dict):
        raise ResultParseError(source_file, "top-level value must be an object")

    try:
        parsed = ResultFile.model_validate(cast("dict[str, object]", data))
    except ValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(p) for p in first["loc"])
        raise ResultParseError(source_file, f"{where}: {first['msg']}") from e

    if parsed.scenario.trees is None:
        raise ResultParseError(source_file, "scenario.trees is missing")

    try:
        layout = ParkLayout.from_raw(parsed.scenario.trees)
    except InvalidLayoutError as e:
        raise ResultParseError(source_file, f"scenario.trees: {e}") from e

    raw_removals = _raw_removals(parsed.result.identified_trees)

    return ResultRecord(
        layout=layout,
        removal_ids=normalize_removals(raw_removals),
        raw_removals=raw_removals,
        source_file=source_file,
        display_stem=display_stem(source_file),
        model=parsed.llm.model or UNKNOWN_MODEL,
        hint_mode=parsed.scenario.hint_mode or "",
        meta_tag=parsed.meta.tag or "",
        timestamp=parsed.meta.timestamp,
        csv_hash=parsed.scenario.csv_hash,
        batch_index=batch_index,
    )


def parse_batch(
    sources: Iterable[tuple[str, RawContent]],
) -> tuple[list[ResultRecord], list[ParseFailure]]:
    """Parse every source, collecting failures instead of aborting.

    Args:
        sources: ``(source_file, content)`` pairs in upload order

    Returns:
        Parsed records in upload order, and one failure per bad file

    """
    records: list[ResultRecord] = []
    failures: list[ParseFailure] = []

    for source_file, content in sources:
        try:
            record = parse_result(content, source_file, batch_index=len(records))
        except ResultParseError as e:
            logger.warning("Could not process %s: %s", source_file, e.reason)
            failures.append(ParseFailure(source_file=source_file, reason=e.reason))
            continue
        records.append(record)

    return records, failures


def read_result_files(paths: Iterable[Path]) -> list[Path]:
    """Expand directories and keep only JSON files, in the given order.

    Raises:
        NoResultFilesError: if no JSON file is found.

    """
    selected: list[Path] = []
    for path in paths:
        if path.is_dir():
            selected.extend(
                sorted(p for p in path.iterdir() if p.name.endswith(JSON_SUFFIX))
            )
        elif path.name.endswith(JSON_SUFFIX):
            selected.append(path)
        else:
            logger.warning("Skipping non-JSON file: %s", path.name)

    if not selected:
        msg = "No JSON result files selected"
        raise NoResultFilesError(msg)

    return selected


def load_batch(paths: Iterable[Path]) -> tuple[list[ResultRecord], list[ParseFailure]]:
    """Read and parse result files from disk.

    Unreadable files are reported as failures like malformed ones.

    Raises:
        NoResultFilesError: if no JSON file is found.

    """
    sources: list[tuple[str, RawContent]] = []
    failures: list[ParseFailure] = []

    for path in read_result_files(paths):
        try:
            sources.append((path.name, path.read_text(encoding="utf-8")))
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s: %s", path, e)
            failures.append(ParseFailure(source_file=path.name, reason=str(e)))

    records, parse_failures = parse_batch(sources)
    return records, failures + parse_failures

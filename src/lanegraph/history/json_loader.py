"""Load commit history from a JSON document.

Format:
    {
      "commits": [{"hash": "...", "parents": ["..."], "message": "...",
                   "author": "...", "date": "2024-05-01T10:00:00+00:00",
                   "refs": ["main"]}],
      "refs": [{"name": "main", "hash": "...", "kind": "branch"}]
    }

Only "hash" is required per commit and "name"/"hash" per ref.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

from ..exceptions import HistoryFormatError
from ..graph.models import Commit, Ref, RefKind


def _parse_date(value: Any, source: Union[str, Path]) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise HistoryFormatError(source, f"date must be an ISO 8601 string, got {value!r}")
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise HistoryFormatError(source, f"invalid date {value!r}") from None


def _commit_from_dict(data: Any, source: Union[str, Path]) -> Commit:
    if not isinstance(data, dict) or not isinstance(data.get("hash"), str):
        raise HistoryFormatError(source, f"commit entry needs a string 'hash': {data!r}")
    parents = data.get("parents", [])
    if not isinstance(parents, list) or not all(isinstance(p, str) for p in parents):
        raise HistoryFormatError(source, f"parents of {data['hash']} must be a list of strings")
    return Commit(
        hash=data["hash"],
        parents=tuple(parents),
        message=str(data.get("message", "")),
        author=str(data.get("author", "")),
        date=_parse_date(data.get("date"), source),
        refs=tuple(str(r) for r in data.get("refs", [])),
    )


def _ref_from_dict(data: Any, source: Union[str, Path]) -> Ref:
    if not isinstance(data, dict) or not isinstance(data.get("name"), str) or not isinstance(
        data.get("hash"), str
    ):
        raise HistoryFormatError(source, f"ref entry needs string 'name' and 'hash': {data!r}")
    try:
        kind = RefKind(data.get("kind", "branch"))
    except ValueError:
        kind = RefKind.OTHER
    return Ref(name=data["name"], hash=data["hash"], kind=kind, ref=str(data.get("ref", "")))


def parse_history(data: Any, source: Union[str, Path] = "<data>") -> tuple[list[Commit], list[Ref]]:
    """Convert an already-decoded JSON document into (commits, refs)."""
    if not isinstance(data, dict) or not isinstance(data.get("commits"), list):
        raise HistoryFormatError(source, "expected an object with a 'commits' list")
    refs = data.get("refs", [])
    if not isinstance(refs, list):
        raise HistoryFormatError(source, "'refs' must be a list")
    return (
        [_commit_from_dict(c, source) for c in data["commits"]],
        [_ref_from_dict(r, source) for r in refs],
    )


def load_history(path: Union[str, Path]) -> tuple[list[Commit], list[Ref]]:
    """Read (commits, refs) from a JSON file.

    Raises:
        HistoryFormatError: If the file cannot be read or does not match the format.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise HistoryFormatError(path, f"cannot read file: {e}") from e
    except json.JSONDecodeError as e:
        raise HistoryFormatError(path, f"invalid JSON: {e}") from e
    return parse_history(data, path)

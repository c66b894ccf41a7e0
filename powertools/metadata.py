"""Metadata stored next to index files, used to tell whether an index is stale."""

from __future__ import annotations

import hashlib
import json
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterator, Optional, Union

from .filters import is_relevant_file, should_ignore

PathLike = Union[str, Path]

_INDEX_FILES = (
    "index.typescript.scip",
    "index.javascript.scip",
    "index.python.scip",
    "index.rust.scip",
    "index.cpp.scip",
)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _walk_files(root: Path) -> Iterator[Path]:
    """Yield regular files under `root` in name order, skipping ignored paths."""
    if should_ignore(root):
        return
    if root.is_file():
        yield root
        return
    with os.scandir(root) as listing:
        entries = sorted(listing, key=lambda entry: entry.name)
    for entry in entries:
        path = root / entry.name
        if should_ignore(path):
            continue
        if entry.is_dir(follow_symlinks=False):
            yield from _walk_files(path)
        elif entry.is_file(follow_symlinks=False):
            yield path


def _encode_time(moment: datetime) -> dict[str, int]:
    delta = moment - _EPOCH
    seconds = delta.days * 86400 + delta.seconds
    return {"secs_since_epoch": seconds, "nanos_since_epoch": delta.microseconds * 1000}


def _decode_time(value: dict) -> datetime:
    seconds = int(value["secs_since_epoch"])
    nanos = int(value["nanos_since_epoch"])
    return _EPOCH + timedelta(seconds=seconds, microseconds=nanos // 1000)


@dataclass
class IndexMetadata:
    """Snapshot of the project's source files taken when an index was built."""

    created_at: datetime
    files_hash: int
    file_count: int
    indexer_version: Optional[str] = None

    @classmethod
    def generate(cls, project_root: PathLike) -> "IndexMetadata":
        """Hash the paths and modification times of the project's source files."""
        hasher = hashlib.blake2b(digest_size=8)
        file_count = 0
        for path in _walk_files(Path(project_root)):
            if not is_relevant_file(path):
                continue
            hasher.update(os.fsencode(str(path)))
            hasher.update(b"\0")
            try:
                mtime = path.stat().st_mtime_ns
            except OSError:
                pass
            else:
                hasher.update(str(mtime).encode("ascii"))
            hasher.update(b"\0")
            file_count += 1
        return cls(
            created_at=datetime.now(timezone.utc),
            files_hash=int.from_bytes(hasher.digest(), "big"),
            file_count=file_count,
        )

    @staticmethod
    def _meta_path(index_path: PathLike) -> Path:
        index_path = Path(index_path)
        return index_path.with_name(index_path.stem + ".scip.meta")

    def save(self, index_path: PathLike) -> None:
        """Write the metadata as JSON next to the index file."""
        document = {
            "created_at": _encode_time(self.created_at),
            "files_hash": self.files_hash,
            "file_count": self.file_count,
            "indexer_version": self.indexer_version,
        }
        self._meta_path(index_path).write_text(json.dumps(document, indent=2), encoding="utf-8")

    @classmethod
    def load(cls, index_path: PathLike) -> "IndexMetadata":
        """Read the metadata saved for an index; raise ValueError if it is malformed."""
        text = cls._meta_path(index_path).read_text(encoding="utf-8")
        try:
            document = json.loads(text)
            version = document["indexer_version"]
            return cls(
                created_at=_decode_time(document["created_at"]),
                files_hash=int(document["files_hash"]),
                file_count=int(document["file_count"]),
                indexer_version=None if version is None else str(version),
            )
        except (ValueError, KeyError, TypeError) as exc:
            raise ValueError("Failed to parse metadata") from exc

    def is_stale(self, project_root: PathLike) -> bool:
        """Return True if the project's source files changed since this snapshot."""
        return self.files_hash != self.generate(project_root).files_hash

    @classmethod
    def exists(cls, index_path: PathLike) -> bool:
        return cls._meta_path(index_path).exists()


def check_staleness(project_root: PathLike) -> Optional[str]:
    """Return the name of the first index that is stale or lacks metadata, if any."""
    root = Path(project_root)
    for index_file in _INDEX_FILES:
        index_path = root / index_file
        if not index_path.exists():
            continue
        try:
            metadata = IndexMetadata.load(index_path)
        except (OSError, ValueError):
            return index_file
        if metadata.is_stale(root):
            return index_file
    return None
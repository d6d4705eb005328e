from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone

from ..errors import NotFound, StorageIOError
from ..logging_setup import get_logger

logger = get_logger('listing')


@dataclass(frozen=True)
class DirectoryEntry:
    name: str
    rel_path: str
    is_dir: bool
    size: int
    modified: datetime


def sort_key(entry: DirectoryEntry) -> tuple[bool, str, str]:
    return (not entry.is_dir, entry.name.lower(), entry.name)


class DirectoryLister:
    def list(self, absolute_path: str, root: str) -> list[DirectoryEntry]:
        try:
            scanner = os.scandir(absolute_path)
        except (FileNotFoundError, NotADirectoryError):
            raise NotFound('Directory not found')
        except OSError as exc:
            logger.error('Cannot read directory %s: %s', absolute_path, exc)
            raise StorageIOError(cause=exc) from exc

        items: list[DirectoryEntry] = []
        with scanner:
            for entry in scanner:
                try:
                    stat = entry.stat()
                    is_dir = entry.is_dir()
                except OSError:
                    try:
                        stat = entry.stat(follow_symlinks=False)
                        is_dir = False
                    except OSError as exc:
                        logger.debug('Skipping %s: %s', entry.path, exc)
                        continue
                items.append(
                    DirectoryEntry(
                        name=entry.name,
                        rel_path=os.path.relpath(entry.path, root),
                        is_dir=is_dir,
                        size=0 if is_dir else stat.st_size,
                        modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                    )
                )

        items.sort(key=sort_key)
        return items

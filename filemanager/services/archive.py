from __future__ import annotations

import os
import shutil
import stat
import tempfile
import zipfile
from dataclasses import dataclass, field
from typing import BinaryIO, Iterator

from ..errors import NotFound, StorageIOError
from ..logging_setup import get_logger
from .paths import ResolvedLocation

logger = get_logger('archive')

SPOOL_MAX_BYTES = 16 * 1024 * 1024
STREAM_CHUNK_BYTES = 64 * 1024
FALLBACK_NAME = 'download'


@dataclass
class ZipArchive:
    stream: BinaryIO
    filename: str
    skipped: list[str] = field(default_factory=list)

    def iter_chunks(self, chunk_size: int = STREAM_CHUNK_BYTES) -> Iterator[bytes]:
        try:
            while chunk := self.stream.read(chunk_size):
                yield chunk
        finally:
            self.stream.close()


def archive_name(location: ResolvedLocation) -> str:
    name = '' if location.is_root else location.relative_path.replace(os.sep, '_')
    if not name:
        name = os.path.basename(location.absolute_path)
    if not name:
        name = FALLBACK_NAME
    return f'{name}.zip'


def _member_name(path: str, base: str) -> str:
    return '/'.join(os.path.relpath(path, base).split(os.sep))


class ArchiveBuilder:
    """Zip a confined file or directory into a spooled temporary file.

    Members that cannot be read while walking a directory are skipped and
    recorded on the returned archive; the archive itself is always finalized.
    """

    def __init__(self, spool_max_bytes: int = SPOOL_MAX_BYTES):
        self.spool_max_bytes = spool_max_bytes

    def build(self, location: ResolvedLocation) -> ZipArchive:
        source = location.absolute_path
        try:
            st = os.stat(source)
        except FileNotFoundError:
            raise NotFound('Path not found')
        except OSError as exc:
            raise StorageIOError(cause=exc) from exc

        spool = tempfile.SpooledTemporaryFile(max_size=self.spool_max_bytes)
        archive = ZipArchive(stream=spool, filename=archive_name(location))
        try:
            with zipfile.ZipFile(spool, mode='w', compression=zipfile.ZIP_DEFLATED) as zf:
                if stat.S_ISDIR(st.st_mode):
                    self._add_tree(zf, source, archive.skipped)
                else:
                    self._add_file(zf, source, os.path.basename(source))
        except OSError as exc:
            spool.close()
            logger.error('Cannot archive %s: %s', source, exc)
            raise StorageIOError(cause=exc) from exc
        except BaseException:
            spool.close()
            raise

        if archive.skipped:
            logger.warning('Archive of %s skipped %d member(s): %s', source, len(archive.skipped), ', '.join(archive.skipped))
        spool.seek(0)
        return archive

    def _add_file(self, zf: zipfile.ZipFile, path: str, arcname: str) -> None:
        with open(path, 'rb') as src:
            info = zipfile.ZipInfo.from_file(path, arcname, strict_timestamps=False)
            info.compress_type = zipfile.ZIP_DEFLATED
            with zf.open(info, 'w') as dest:
                shutil.copyfileobj(src, dest, STREAM_CHUNK_BYTES)

    def _add_tree(self, zf: zipfile.ZipFile, base: str, skipped: list[str]) -> None:
        def _on_error(exc: OSError):
            if exc.filename and os.path.normpath(exc.filename) == base:
                raise exc
            skipped.append(_member_name(exc.filename, base) + '/' if exc.filename else '?')

        for dirpath, dirnames, filenames in os.walk(base, onerror=_on_error, followlinks=False):
            dirnames.sort()
            for filename in sorted(filenames):
                path = os.path.join(dirpath, filename)
                member = _member_name(path, base)
                try:
                    if not stat.S_ISREG(os.lstat(path).st_mode):
                        continue
                    self._add_file(zf, path, member)
                except OSError as exc:
                    logger.debug('Skipping %s: %s', path, exc)
                    skipped.append(member)

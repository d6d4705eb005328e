from __future__ import annotations

import contextlib
import os
import shutil
import stat
from typing import BinaryIO

from ..errors import NotFound, PathEscape, StorageIOError
from ..logging_setup import get_logger
from .paths import is_strictly_within, is_within

logger = get_logger('file_ops')

DEFAULT_CHUNK_BYTES = 1024 * 1024


def base_name(name: str) -> str:
    return os.path.basename(name.replace('\\', '/').rstrip('/'))


def child_path(directory: str, name: str) -> str:
    """Join a client-supplied name under an already confined directory.

    Only the base name is used. A name that would climb out of the directory
    is rejected rather than neutralized.
    """
    if '\x00' in name:
        raise PathEscape('name contains a NUL byte')
    raw = os.path.normpath(os.path.join(directory, name.replace('\\', '/').lstrip('/')))
    if not is_within(directory, raw):
        logger.warning('Rejected name escaping %s: %r', directory, name)
        raise PathEscape()

    base = base_name(name)
    if base in ('', os.curdir, os.pardir):
        raise PathEscape('invalid name')

    target = os.path.join(directory, base)
    if not is_strictly_within(directory, target):
        raise PathEscape()
    return target


class FileOps:
    def __init__(self, chunk_bytes: int = DEFAULT_CHUNK_BYTES):
        self.chunk_bytes = chunk_bytes

    def mkdir(self, directory: str, name: str) -> str:
        target = child_path(directory, name)
        try:
            os.makedirs(target, mode=0o755, exist_ok=True)
        except OSError as exc:
            logger.error('mkdir failed for %s: %s', target, exc)
            raise StorageIOError(cause=exc) from exc
        logger.info('Created directory %s', target)
        return target

    def delete(self, directory: str, name: str) -> str:
        target = child_path(directory, name)
        try:
            st = os.lstat(target)
        except FileNotFoundError:
            raise NotFound(f'{base_name(name)} not found')
        except OSError as exc:
            raise StorageIOError(cause=exc) from exc

        try:
            if stat.S_ISDIR(st.st_mode):
                shutil.rmtree(target)
            else:
                os.remove(target)
        except OSError as exc:
            logger.error('delete failed for %s: %s', target, exc)
            raise StorageIOError(cause=exc) from exc
        logger.info('Deleted %s', target)
        return target

    def rename(self, directory: str, old_name: str, new_name: str) -> str:
        source = child_path(directory, old_name)
        target = child_path(directory, new_name)
        for path in (source, target):
            if not is_strictly_within(directory, path):
                raise PathEscape()

        try:
            os.rename(source, target)
        except FileNotFoundError:
            raise NotFound(f'{base_name(old_name)} not found')
        except OSError as exc:
            logger.error('rename failed %s -> %s: %s', source, target, exc)
            raise StorageIOError(cause=exc) from exc
        logger.info('Renamed %s -> %s', source, target)
        return target

    def save_upload(self, directory: str, filename: str, stream: BinaryIO) -> int:
        target = child_path(directory, filename)
        written = 0
        created = False
        try:
            with open(target, 'wb') as f:
                created = True
                while chunk := stream.read(self.chunk_bytes):
                    f.write(chunk)
                    written += len(chunk)
                f.flush()
                os.fsync(f.fileno())
        except OSError as exc:
            logger.error('upload failed for %s: %s', target, exc)
            if created:
                with contextlib.suppress(OSError):
                    os.remove(target)
            raise StorageIOError(cause=exc) from exc
        logger.info('Uploaded %s (%d bytes)', target, written)
        return written

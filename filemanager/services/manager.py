from __future__ import annotations

from enum import Enum
from typing import Any, BinaryIO, Callable

from ..config import FileManagerConfig
from .archive import ArchiveBuilder, ZipArchive
from .breadcrumb import BreadcrumbSegment, build_breadcrumb
from .file_ops import FileOps
from .listing import DirectoryEntry, DirectoryLister
from .paths import PathResolver, ResolvedLocation


class Operation(str, Enum):
    LIST = 'list'
    MKDIR = 'mkdir'
    DELETE = 'delete'
    RENAME = 'rename'
    ARCHIVE = 'archive'


class FileManager:
    """Single entry point: every operation resolves its location first."""

    def __init__(self, config: FileManagerConfig):
        self.config = config
        self.resolver = PathResolver(config.allowed_roots, strict_symlinks=config.strict_symlinks)
        self.lister = DirectoryLister()
        self.ops = FileOps(chunk_bytes=config.upload_chunk_bytes)
        self.archiver = ArchiveBuilder()
        self._handlers: dict[Operation, Callable[..., Any]] = {
            Operation.LIST: lambda loc: self.lister.list(loc.absolute_path, loc.root),
            Operation.MKDIR: lambda loc, name: self.ops.mkdir(loc.absolute_path, name),
            Operation.DELETE: lambda loc, name: self.ops.delete(loc.absolute_path, name),
            Operation.RENAME: lambda loc, old, new: self.ops.rename(loc.absolute_path, old, new),
            Operation.ARCHIVE: self.archiver.build,
        }

    @property
    def roots(self) -> tuple[str, ...]:
        return self.resolver.roots

    @property
    def default_root(self) -> str:
        return self.resolver.roots[0]

    def resolve(self, root: str, path: str) -> ResolvedLocation:
        return self.resolver.resolve(root, path)

    def perform(self, op: Operation, root: str, path: str, **fields: Any) -> Any:
        location = self.resolve(root, path)
        return self._handlers[Operation(op)](location, **fields)

    def list(self, root: str, path: str) -> list[DirectoryEntry]:
        return self.perform(Operation.LIST, root, path)

    def make_directory(self, root: str, path: str, name: str) -> str:
        return self.perform(Operation.MKDIR, root, path, name=name)

    def delete(self, root: str, path: str, name: str) -> str:
        return self.perform(Operation.DELETE, root, path, name=name)

    def rename(self, root: str, path: str, old: str, new: str) -> str:
        return self.perform(Operation.RENAME, root, path, old=old, new=new)

    def archive(self, root: str, path: str) -> ZipArchive:
        return self.perform(Operation.ARCHIVE, root, path)

    def save_upload(self, location: ResolvedLocation, filename: str, stream: BinaryIO) -> int:
        return self.ops.save_upload(location.absolute_path, filename, stream)

    def breadcrumb(self, location: ResolvedLocation) -> list[BreadcrumbSegment]:
        return build_breadcrumb(location.root, location.relative_path)

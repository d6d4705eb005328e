from __future__ import annotations

import os
from dataclasses import dataclass

from ..errors import InvalidRoot, PathEscape
from ..logging_setup import get_logger

logger = get_logger('paths')


@dataclass(frozen=True)
class ResolvedLocation:
    root: str
    relative_path: str
    absolute_path: str

    @property
    def is_root(self) -> bool:
        return self.relative_path == '.'


def is_within(base: str, candidate: str) -> bool:
    """Lexical containment: candidate is base itself or one of its descendants."""
    rel = os.path.relpath(candidate, base)
    return rel != os.pardir and not rel.startswith(os.pardir + os.sep)


def is_strictly_within(base: str, candidate: str) -> bool:
    return is_within(base, candidate) and os.path.relpath(candidate, base) != os.curdir


def clean_relative(rel: str) -> str:
    if '\x00' in rel:
        raise PathEscape('path contains a NUL byte')
    rel = rel.replace('\\', '/')
    if rel in ('', '/'):
        return '.'
    cleaned = os.path.normpath('/' + rel).lstrip('/')
    return cleaned or '.'


class PathResolver:
    def __init__(self, allowed_roots: tuple[str, ...], strict_symlinks: bool = False):
        self._roots = tuple(allowed_roots)
        self._members = frozenset(self._roots)
        self.strict_symlinks = strict_symlinks

    @property
    def roots(self) -> tuple[str, ...]:
        return self._roots

    def match_root(self, root_param: str) -> str:
        if not root_param or '\x00' in root_param:
            raise InvalidRoot()
        root = os.path.normpath(root_param)
        if root not in self._members:
            logger.warning('Rejected unknown root %r', root_param)
            raise InvalidRoot()
        return root

    def resolve(self, root_param: str, rel_param: str) -> ResolvedLocation:
        root = self.match_root(root_param)
        try:
            rel = clean_relative(rel_param or '')
        except PathEscape:
            logger.warning('Rejected path with NUL byte under %s', root)
            raise

        candidate = os.path.normpath(os.path.join(root, rel))
        if not is_within(root, candidate):
            logger.warning('Rejected path escaping %s: %r', root, rel_param)
            raise PathEscape()

        if self.strict_symlinks and not is_within(os.path.realpath(root), os.path.realpath(candidate)):
            logger.warning('Rejected symlink escaping %s: %r', root, rel_param)
            raise PathEscape()

        return ResolvedLocation(root=root, relative_path=os.path.relpath(candidate, root), absolute_path=candidate)

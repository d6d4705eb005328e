from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class FileManagerConfig:
    allowed_roots: tuple[str, ...]
    strict_symlinks: bool = False
    upload_chunk_bytes: int = 1024 * 1024

    def __post_init__(self):
        if not self.allowed_roots:
            raise ValueError('No allowed roots configured')
        for root in self.allowed_roots:
            if not os.path.isabs(root) or os.path.normpath(root) != root:
                raise ValueError(f'Allowed root must be a clean absolute path: {root!r}')


def parse_roots(value: str) -> tuple[str, ...]:
    roots: list[str] = []
    for raw in value.split(','):
        raw = raw.strip()
        if not raw:
            continue
        root = os.path.normpath(os.path.abspath(raw))
        if root not in roots:
            roots.append(root)
    return tuple(roots)


def _read_secret(path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    try:
        return Path(path).read_text(encoding='utf-8').strip()
    except OSError:
        return None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8')

    app_name: str = 'Root File Manager'
    app_host: str = '0.0.0.0'
    app_port: int = 8080
    allowed_roots: str = '/data/sdd1,/data/hdd1'
    username: str = 'admin'
    username_file: Optional[str] = None
    password: str = 'changeme'
    password_file: Optional[str] = None
    password_hash: Optional[str] = None
    log_level: str = 'info'
    strict_symlinks: bool = False
    upload_chunk_bytes: int = Field(default=1024 * 1024, ge=4096, le=64 * 1024 * 1024)

    @model_validator(mode='after')
    def _load_secret_files(self):
        username = _read_secret(self.username_file)
        if username:
            self.username = username
        password = _read_secret(self.password_file)
        if password:
            self.password = password
        return self

    def to_config(self) -> FileManagerConfig:
        return FileManagerConfig(
            allowed_roots=parse_roots(self.allowed_roots),
            strict_symlinks=self.strict_symlinks,
            upload_chunk_bytes=self.upload_chunk_bytes,
        )

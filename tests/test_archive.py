from __future__ import annotations

import os
import zipfile

import pytest

from filemanager.errors import NotFound, StorageIOError
from filemanager.services.archive import ArchiveBuilder, archive_name
from filemanager.services.paths import PathResolver


def _resolve(root, rel=''):
    return PathResolver((str(root),)).resolve(str(root), rel)


def _members(archive) -> dict[str, bytes]:
    with zipfile.ZipFile(archive.stream) as zf:
        return {name: zf.read(name) for name in zf.namelist()}


def test_directory_archive_uses_relative_member_names(tmp_path):
    src = tmp_path / 'docs'
    (src / 'nested').mkdir(parents=True)
    (src / 'a.txt').write_bytes(b'alpha')
    (src / 'nested' / 'b.txt').write_bytes(b'beta' * 1000)
    (src / 'empty').mkdir()

    archive = ArchiveBuilder().build(_resolve(tmp_path, 'docs'))

    assert _members(archive) == {'a.txt': b'alpha', 'nested/b.txt': b'beta' * 1000}
    assert archive.filename == 'docs.zip'
    assert archive.skipped == []


def test_single_file_archive_has_one_member(tmp_path):
    (tmp_path / 'music').mkdir()
    (tmp_path / 'music' / 'song.mp3').write_bytes(b'\xff\xfb')

    archive = ArchiveBuilder().build(_resolve(tmp_path, 'music/song.mp3'))

    assert _members(archive) == {'song.mp3': b'\xff\xfb'}
    assert archive.filename == 'music_song.mp3.zip'


def test_root_archive_named_after_root(tmp_path):
    root = tmp_path / 'hdd1'
    root.mkdir()
    (root / 'x.txt').write_text('x')

    archive = ArchiveBuilder().build(_resolve(root))

    assert archive.filename == 'hdd1.zip'
    assert list(_members(archive)) == ['x.txt']


def test_archive_name_falls_back_for_filesystem_root():
    location = PathResolver(('/',)).resolve('/', '')
    assert archive_name(location) == 'download.zip'


def test_archive_skips_symlinks(tmp_path):
    src = tmp_path / 'src'
    src.mkdir()
    (src / 'real.txt').write_text('real')
    (tmp_path / 'secret.txt').write_text('secret')
    (src / 'leak.txt').symlink_to(tmp_path / 'secret.txt')

    archive = ArchiveBuilder().build(_resolve(tmp_path, 'src'))

    assert list(_members(archive)) == ['real.txt']


def test_unreadable_member_is_skipped_and_recorded(tmp_path, monkeypatch):
    src = tmp_path / 'src'
    src.mkdir()
    (src / 'good.txt').write_text('good')
    (src / 'bad.txt').write_text('bad')

    original = ArchiveBuilder._add_file

    def _flaky(self, zf, path, arcname):
        if arcname == 'bad.txt':
            raise PermissionError(13, 'Permission denied', path)
        return original(self, zf, path, arcname)

    monkeypatch.setattr(ArchiveBuilder, '_add_file', _flaky)

    archive = ArchiveBuilder().build(_resolve(tmp_path, 'src'))

    assert archive.skipped == ['bad.txt']
    assert _members(archive) == {'good.txt': b'good'}


def test_unreadable_single_file_fails_whole_archive(tmp_path, monkeypatch):
    (tmp_path / 'f.txt').write_text('f')

    def _deny(self, zf, path, arcname):
        raise PermissionError(13, 'Permission denied', path)

    monkeypatch.setattr(ArchiveBuilder, '_add_file', _deny)

    with pytest.raises(StorageIOError):
        ArchiveBuilder().build(_resolve(tmp_path, 'f.txt'))


def test_missing_source_raises_not_found(tmp_path):
    with pytest.raises(NotFound):
        ArchiveBuilder().build(_resolve(tmp_path, 'ghost'))


def test_iter_chunks_streams_whole_archive(tmp_path):
    (tmp_path / 'big.bin').write_bytes(b'z' * 200_000)
    archive = ArchiveBuilder(spool_max_bytes=1024).build(_resolve(tmp_path, 'big.bin'))

    data = b''.join(archive.iter_chunks(chunk_size=4096))

    assert data.startswith(b'PK')
    assert archive.stream.closed


def test_files_older_than_1980_are_archived(tmp_path):
    src = tmp_path / 'src'
    src.mkdir()
    old = src / 'old.txt'
    old.write_text('epoch')
    os.utime(old, (0, 0))

    archive = ArchiveBuilder().build(_resolve(tmp_path, 'src'))

    assert archive.skipped == []
    assert _members(archive) == {'old.txt': b'epoch'}

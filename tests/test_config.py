from __future__ import annotations

import pytest

from filemanager.config import FileManagerConfig, Settings, parse_roots


def test_parse_roots_cleans_and_dedupes():
    assert parse_roots(' /data/sdd1/ , /data/hdd1,,/data/./sdd1 ') == ('/data/sdd1', '/data/hdd1')


def test_config_rejects_empty_roots():
    with pytest.raises(ValueError):
        FileManagerConfig(allowed_roots=())


def test_config_rejects_unclean_root():
    with pytest.raises(ValueError):
        FileManagerConfig(allowed_roots=('/data/../etc/',))


def test_config_is_immutable():
    config = FileManagerConfig(allowed_roots=('/data',))
    with pytest.raises(AttributeError):
        config.allowed_roots = ('/etc',)


def test_settings_reads_secret_files(tmp_path):
    user_file = tmp_path / 'user'
    pass_file = tmp_path / 'pass'
    user_file.write_text('operator\n')
    pass_file.write_text('  s3cret  \n')

    settings = Settings(
        _env_file=None,
        username='ignored',
        username_file=str(user_file),
        password='ignored',
        password_file=str(pass_file),
    )

    assert settings.username == 'operator'
    assert settings.password == 's3cret'


def test_settings_falls_back_when_secret_file_missing(tmp_path):
    settings = Settings(_env_file=None, password='plain', password_file=str(tmp_path / 'missing'))
    assert settings.password == 'plain'


def test_settings_builds_config(tmp_path):
    settings = Settings(_env_file=None, allowed_roots=f'{tmp_path}/a,{tmp_path}/b/', strict_symlinks=True)
    config = settings.to_config()

    assert config.allowed_roots == (f'{tmp_path}/a', f'{tmp_path}/b')
    assert config.strict_symlinks is True

from __future__ import annotations

import base64

import pytest
from fastapi.testclient import TestClient

from filemanager.config import Settings
from filemanager.main import create_app

USERNAME = 'admin'
PASSWORD = 'test-password'


@pytest.fixture()
def roots(tmp_path):
    first = tmp_path / 'sdd1'
    second = tmp_path / 'hdd1'
    first.mkdir()
    second.mkdir()
    return first, second


@pytest.fixture()
def app(roots):
    settings = Settings(
        _env_file=None,
        allowed_roots=','.join(str(r) for r in roots),
        username=USERNAME,
        username_file=None,
        password=PASSWORD,
        password_file=None,
        password_hash=None,
    )
    return create_app(settings)


@pytest.fixture()
def anon_client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def client(app):
    token = base64.b64encode(f'{USERNAME}:{PASSWORD}'.encode()).decode()
    with TestClient(app) as c:
        c.headers.update({'Authorization': f'Basic {token}'})
        yield c

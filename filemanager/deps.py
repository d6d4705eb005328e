from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from .logging_setup import get_logger
from .security import Credentials
from .services.manager import FileManager

logger = get_logger('auth')

basic_auth = HTTPBasic(realm='Restricted', auto_error=False)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail='Unauthorized',
        headers={'WWW-Authenticate': 'Basic realm="Restricted"'},
    )


def get_manager(request: Request) -> FileManager:
    return request.app.state.manager


def require_user(request: Request, credentials: HTTPBasicCredentials | None = Depends(basic_auth)) -> str:
    if credentials is None:
        raise _unauthorized()

    expected: Credentials = request.app.state.credentials
    if not expected.check(credentials.username, credentials.password):
        client = request.client.host if request.client else 'unknown'
        logger.warning('Failed login for %r from %s', credentials.username, client)
        raise _unauthorized()
    return credentials.username

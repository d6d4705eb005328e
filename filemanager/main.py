from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse

from .config import Settings
from .errors import FileManagerError, StorageIOError
from .logging_setup import configure_logging, get_logger
from .routers import api, files
from .security import Credentials, apply_security_headers
from .services.manager import FileManager

logger = get_logger('main')


def _wants_json(request: Request) -> bool:
    return request.url.path.startswith('/api/')


async def file_manager_error_handler(request: Request, exc: FileManagerError):
    message = exc.message
    if isinstance(exc, StorageIOError):
        message = exc.detail
    if _wants_json(request):
        return JSONResponse({'detail': message}, status_code=exc.status_code)
    return PlainTextResponse(message, status_code=exc.status_code)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception('Unhandled error on %s %s', request.method, request.url.path, exc_info=exc)
    if _wants_json(request):
        return JSONResponse({'detail': 'Internal server error. Please try again.'}, status_code=500)
    return HTMLResponse('<h1>Unexpected error</h1><p>Please try again.</p>', status_code=500)


@asynccontextmanager
async def lifespan(app: FastAPI):
    manager: FileManager = app.state.manager
    for root in manager.roots:
        if not os.path.isdir(root):
            logger.warning('Allowed root %s is not a directory', root)
    logger.info('%s ready (roots: %s)', app.title, ', '.join(manager.roots))
    yield


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings.log_level)

    try:
        config = settings.to_config()
    except ValueError as exc:
        raise RuntimeError(f'Invalid ALLOWED_ROOTS: {exc}') from exc

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.manager = FileManager(config)
    app.state.credentials = Credentials(
        username=settings.username,
        password=settings.password,
        password_hash=settings.password_hash,
    )

    @app.middleware('http')
    async def security_middleware(request: Request, call_next):
        response = await call_next(request)
        return apply_security_headers(response)

    app.add_exception_handler(FileManagerError, file_manager_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.get('/healthz')
    def healthz():
        return {'ok': True}

    app.include_router(api.router)
    app.include_router(files.router)
    return app


app = create_app()


def run() -> None:
    import uvicorn

    settings = Settings()
    uvicorn.run('filemanager.main:app', host=settings.app_host, port=settings.app_port, log_level=settings.log_level)

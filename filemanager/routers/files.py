from __future__ import annotations

import os
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.responses import FileResponse, RedirectResponse, StreamingResponse

from ..deps import get_manager, require_user
from ..errors import NotFound
from ..services.manager import FileManager, Operation
from ..templating import browse_url, templates

router = APIRouter(tags=['files'], dependencies=[Depends(require_user)])


def _attachment(filename: str) -> str:
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


def _back_to(root: str, path: str) -> RedirectResponse:
    return RedirectResponse(browse_url(root, path), status_code=303)


@router.get('/')
def browse(
    request: Request,
    root: str = Query(default=''),
    path: str = Query(default=''),
    manager: FileManager = Depends(get_manager),
):
    location = manager.resolve(root or manager.default_root, path)
    if os.path.isfile(location.absolute_path):
        return FileResponse(location.absolute_path, filename=os.path.basename(location.absolute_path))

    entries = manager.perform(Operation.LIST, location.root, location.relative_path)
    context = {
        'title': request.app.title,
        'location': location,
        'breadcrumb': manager.breadcrumb(location),
        'entries': entries,
        'roots': manager.roots,
    }
    return templates.TemplateResponse(request, 'browse.html', context)


@router.get('/download')
def download(root: str = Query(...), path: str = Query(...), manager: FileManager = Depends(get_manager)):
    location = manager.resolve(root, path)
    if not os.path.isfile(location.absolute_path):
        raise NotFound('File not found')
    return FileResponse(location.absolute_path, filename=os.path.basename(location.absolute_path))


@router.post('/zip')
def zip_download(root: str = Form(...), path: str = Form(default=''), manager: FileManager = Depends(get_manager)):
    archive = manager.perform(Operation.ARCHIVE, root, path)
    headers = {
        'Content-Disposition': _attachment(archive.filename),
        'X-Archive-Skipped': str(len(archive.skipped)),
    }
    return StreamingResponse(archive.iter_chunks(), media_type='application/zip', headers=headers)


@router.post('/upload')
def upload(
    root: str = Form(...),
    path: str = Form(default=''),
    files: Optional[list[UploadFile]] = File(default=None, alias='files[]'),
    manager: FileManager = Depends(get_manager),
):
    location = manager.resolve(root, path)
    uploads = [f for f in files or [] if f.filename]
    if not uploads:
        raise HTTPException(status_code=400, detail='no files')

    for item in uploads:
        manager.save_upload(location, item.filename, item.file)
    return _back_to(location.root, location.relative_path)


@router.post('/mkdir')
def mkdir(
    root: str = Form(...),
    path: str = Form(default=''),
    name: str = Form(..., min_length=1),
    manager: FileManager = Depends(get_manager),
):
    manager.perform(Operation.MKDIR, root, path, name=name)
    return _back_to(root, path)


@router.post('/delete')
def delete(
    root: str = Form(...),
    path: str = Form(default=''),
    name: str = Form(..., min_length=1),
    manager: FileManager = Depends(get_manager),
):
    manager.perform(Operation.DELETE, root, path, name=name)
    return _back_to(root, path)


@router.post('/rename')
def rename(
    root: str = Form(...),
    path: str = Form(default=''),
    old: str = Form(..., min_length=1),
    new: str = Form(..., min_length=1),
    manager: FileManager = Depends(get_manager),
):
    manager.perform(Operation.RENAME, root, path, old=old, new=new)
    return _back_to(root, path)

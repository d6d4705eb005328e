from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ..deps import get_manager, require_user
from ..schemas import BreadcrumbOut, EntryOut, ListingOut
from ..services.manager import FileManager, Operation

router = APIRouter(prefix='/api', tags=['api'], dependencies=[Depends(require_user)])


@router.get('/roots')
def list_roots(manager: FileManager = Depends(get_manager)):
    return {'ok': True, 'data': list(manager.roots)}


@router.get('/files/list')
def list_files(
    root: str = Query(default=''),
    path: str = Query(default=''),
    manager: FileManager = Depends(get_manager),
):
    location = manager.resolve(root or manager.default_root, path)
    entries = manager.perform(Operation.LIST, location.root, location.relative_path)
    listing = ListingOut(
        root=location.root,
        path=location.relative_path,
        breadcrumb=[BreadcrumbOut.model_validate(c) for c in manager.breadcrumb(location)],
        entries=[EntryOut.model_validate(e) for e in entries],
    )
    return {'ok': True, 'data': listing.model_dump(mode='json')}

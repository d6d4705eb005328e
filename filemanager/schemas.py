from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class EntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    rel_path: str
    is_dir: bool
    size: int
    modified: datetime


class BreadcrumbOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    display_name: str
    navigation_path: str


class ListingOut(BaseModel):
    root: str
    path: str
    breadcrumb: list[BreadcrumbOut]
    entries: list[EntryOut]

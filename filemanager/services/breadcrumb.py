from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class BreadcrumbSegment:
    display_name: str
    navigation_path: str


def build_breadcrumb(root: str, relative_path: str) -> list[BreadcrumbSegment]:
    crumbs = [BreadcrumbSegment(display_name=os.path.basename(root) or root, navigation_path='')]
    current = ''
    for part in relative_path.split(os.sep):
        if part in ('', os.curdir):
            continue
        current = os.path.join(current, part) if current else part
        crumbs.append(BreadcrumbSegment(display_name=part, navigation_path=current))
    return crumbs

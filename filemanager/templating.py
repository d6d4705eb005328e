from __future__ import annotations

from datetime import datetime
from pathlib import Path
from urllib.parse import urlencode

from fastapi.templating import Jinja2Templates

TEMPLATE_DIR = Path(__file__).resolve().parent / 'templates'

_SIZE_SUFFIXES = ('KB', 'MB', 'GB', 'TB')


def human_size(n: int) -> str:
    if n < 1024:
        return f'{n} B'
    value = float(n)
    for i, suffix in enumerate(_SIZE_SUFFIXES):
        value /= 1024
        if value < 1024 or i == len(_SIZE_SUFFIXES) - 1:
            return f'{value:.1f} {suffix}'
    return f'{n} B'


def fmt_time(value: datetime) -> str:
    return value.astimezone().strftime('%Y-%m-%d %H:%M')


def browse_url(root: str, path: str = '', endpoint: str = '/') -> str:
    params = {'root': root}
    if path and path != '.':
        params['path'] = path
    return f'{endpoint}?{urlencode(params)}'


templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
templates.env.filters['human_size'] = human_size
templates.env.filters['fmt_time'] = fmt_time
templates.env.globals['browse_url'] = browse_url

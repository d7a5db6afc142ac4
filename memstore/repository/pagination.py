"""
Pagination helpers for repository listings.

`normalize_page` coerces caller-supplied values into a valid window and
`paginate` slices an already ordered sequence into a `Page`.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple, Type

from memstore.config import get_settings
from memstore.domain.models import Page, RecordT


def normalize_page(
    page: Optional[int],
    page_size: Optional[int],
    default_size: Optional[int] = None,
    max_size: Optional[int] = None,
) -> Tuple[int, int]:
    """
    Coerce a (page, page_size) pair into a valid 1-indexed window.

    Parameters
    ----------
    page : int | None
        Requested page; None or values below 1 become 1.
    page_size : int | None
        Requested size; None or values below 1 become `default_size`, values
        above `max_size` are clamped to it.
    default_size : int | None
        Falls back to settings.page_size_default.
    max_size : int | None
        Falls back to settings.page_size_max.

    Returns
    -------
    tuple[int, int]
        The effective (page, page_size).
    """
    if default_size is None or max_size is None:
        settings = get_settings()
        default_size = default_size or settings.page_size_default
        max_size = max_size or settings.page_size_max

    effective_page = page if page is not None and page >= 1 else 1
    if page_size is None or page_size < 1:
        effective_size = default_size
    else:
        effective_size = page_size
    return effective_page, min(effective_size, max_size)


def paginate(
    items: Sequence[RecordT],
    page: int,
    page_size: int,
    model: Optional[Type[RecordT]] = None,
) -> Page[RecordT]:
    """
    Slice an ordered sequence into one page. Out-of-range pages are empty.

    Pass `model` so the page serializes items with their concrete schema
    rather than the bare `Record` fields.
    """
    page_cls = Page[model] if model is not None else Page
    total = len(items)
    start = (page - 1) * page_size
    window = list(items[start : start + page_size]) if start < total else []
    return page_cls(
        items=window,
        total=total,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size) if total else 0,
    )


__all__ = ["normalize_page", "paginate"]

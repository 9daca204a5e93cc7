# comments in English; reST docstrings strict
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class PageOut(Generic[T]):
    """
    One page of results plus pagination metadata.

    :param items: Items on this page.
    :type items: Sequence[T]
    :param total_count: Matches before pagination.
    :type total_count: int
    :param page: Current page (1-based).
    :type page: int
    :param page_size: Page size used.
    :type page_size: int
    :param total_pages: ``ceil(total_count / page_size)``.
    :type total_pages: int
    """

    items: Sequence[T]
    total_count: int
    page: int
    page_size: int
    total_pages: int

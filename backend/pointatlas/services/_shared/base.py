# pointatlas/services/_shared/base.py
from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from pointatlas.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: timezone-aware UTC now."""
    return datetime.now(UTC)


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Own the clock so time-dependent rules are testable.
    * Offer shared validation helpers (pagination).
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services never touch the global session; always use a Unit of Work.
    - Expected failures are returned as ``Result`` values, never raised.
    """

    def __init__(self, *, clock: Clock | None = None) -> None:
        """
        Initialize the base service.

        :param clock: Callable returning an aware UTC ``datetime``.
        :type clock: Callable[[], datetime] | None
        """
        self._clock = clock or utc_now

    def now(self) -> datetime:
        return self._clock()

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(self) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork()

    # ----------------------- Validation utilities ---------------------------

    @staticmethod
    def ensure_pagination(*, page: int, page_size: int, max_page_size: int) -> tuple[int, int]:
        """
        Clamp pagination inputs into their valid ranges.

        :param page: 1-based page number; values below 1 become 1.
        :param page_size: Requested size; clamped into ``[1, max_page_size]``.
        :param max_page_size: Upper bound for ``page_size``.
        :returns: ``(page, page_size)``.
        """
        page = max(1, int(page))
        page_size = min(max(1, int(page_size)), max(1, int(max_page_size)))
        return page, page_size

"""Service layer public API.

Callers can import from :mod:`pointatlas.services` without knowing the
internal structure.

Re-exports
----------
- Base primitives (from ``pointatlas.services._shared``)
    * :class:`BaseService`, :class:`Result`, :class:`Principal`, :class:`PageOut`

- Session lifecycle (from ``pointatlas.services.auth``)
    * :class:`SessionManager`
    * DTOs: :class:`RegisterIn`, :class:`LoginIn`, :class:`RefreshIn`,
      :class:`AuthOut`, :class:`UserOut`, :class:`AuthTokenConfig`

- Markers (from ``pointatlas.services.markers``)
    * :class:`MarkerQueryService`, :class:`MarkerCommandService`
    * DTOs: :class:`MarkerFilter`, :class:`MarkerWriteIn`, :class:`NearbyIn`,
      :class:`MarkerOut`, :class:`NearbyMarkerOut`
"""

from __future__ import annotations

from ._shared.base import BaseService
from ._shared.dto import PageOut
from ._shared.principal import Principal
from ._shared.result import Result
from .auth.dto import AuthOut, AuthTokenConfig, LoginIn, RefreshIn, RegisterIn, UserOut
from .auth.service import SessionManager
from .markers import (
    MarkerCommandService,
    MarkerFilter,
    MarkerOut,
    MarkerQueryService,
    MarkerWriteIn,
    NearbyIn,
    NearbyMarkerOut,
)

__all__ = [
    # Base
    "BaseService",
    "PageOut",
    "Principal",
    "Result",
    # Sessions
    "SessionManager",
    "RegisterIn",
    "LoginIn",
    "RefreshIn",
    "AuthOut",
    "UserOut",
    "AuthTokenConfig",
    # Markers
    "MarkerQueryService",
    "MarkerCommandService",
    "MarkerFilter",
    "MarkerWriteIn",
    "NearbyIn",
    "MarkerOut",
    "NearbyMarkerOut",
]

"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import AuthResponseSchema, LoginSchema, RefreshSchema, RegisterSchema, UserSchema
from .common import PageMetaSchema, build_meta
from .marker import (
    MarkerFilterSchema,
    MarkerPermissionSchema,
    MarkerSchema,
    MarkerWriteSchema,
    NearbyMarkerSchema,
    NearbyQuerySchema,
)

__all__ = [
    "AuthResponseSchema",
    "LoginSchema",
    "RefreshSchema",
    "RegisterSchema",
    "UserSchema",
    "PageMetaSchema",
    "build_meta",
    "MarkerFilterSchema",
    "MarkerPermissionSchema",
    "MarkerSchema",
    "MarkerWriteSchema",
    "NearbyMarkerSchema",
    "NearbyQuerySchema",
]

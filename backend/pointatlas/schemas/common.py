"""Common Marshmallow schemas shared across resources."""

from __future__ import annotations

from marshmallow import Schema, fields


class PageMetaSchema(Schema):
    """Metadata block for paginated responses."""

    total_count = fields.Integer(required=True, data_key="totalCount")
    page = fields.Integer(required=True)
    page_size = fields.Integer(required=True, data_key="pageSize")
    total_pages = fields.Integer(required=True, data_key="totalPages")


def build_meta(*, total_count: int, page: int, page_size: int, total_pages: int) -> dict[str, int]:
    """Return a ``meta`` mapping for paginated responses."""

    return PageMetaSchema().dump(
        {
            "total_count": int(total_count),
            "page": int(page),
            "page_size": int(page_size),
            "total_pages": int(total_pages),
        }
    )

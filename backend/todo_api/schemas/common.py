"""Common Marshmallow schemas shared across resources."""

from __future__ import annotations

import math
from typing import Any

from marshmallow import EXCLUDE, Schema, fields, post_load, validate, validates_schema
from marshmallow.exceptions import ValidationError

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


class PaginationQuerySchema(Schema):
    """
    Validate ``page``/``limit`` query parameters with configurable defaults.

    A ``limit`` above ``max_limit`` is rejected rather than clamped, the same
    rule the todo listing applies.
    """

    class Meta:
        unknown = EXCLUDE

    def __init__(
        self, *, default_limit: int = DEFAULT_LIMIT, max_limit: int = MAX_LIMIT, **kwargs: Any
    ) -> None:
        self._default_limit = default_limit
        self._max_limit = max_limit
        super().__init__(**kwargs)

    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    limit = fields.Integer(validate=validate.Range(min=1))

    @validates_schema
    def _limit_within_max(self, data: dict[str, Any], **_: Any) -> None:
        limit = data.get("limit")
        if limit is not None and limit > self._max_limit:
            raise ValidationError(
                f"Must be less than or equal to {self._max_limit}.", field_name="limit"
            )

    @post_load
    def apply_defaults(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        data.setdefault("limit", self._default_limit)
        data.setdefault("page", 1)
        return data


class MetaSchema(Schema):
    """Metadata block for paginated responses."""

    total = fields.Integer(required=True)
    page = fields.Integer(required=True)
    limit = fields.Integer(required=True)
    total_pages = fields.Integer(required=True, data_key="totalPages")


def build_meta(*, total: int, page: int, limit: int) -> dict[str, int]:
    """Return a ``meta`` mapping for paginated responses."""

    total_pages = math.ceil(total / limit) if limit else 0
    return MetaSchema().dump(
        {"total": int(total), "page": int(page), "limit": int(limit), "total_pages": total_pages}
    )

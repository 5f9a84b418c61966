"""Todo resource schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, fields, post_load, validate

from todo_api.models.todo import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH
from todo_api.services.todos.dto import SORT_ORDERS, SORTABLE_FIELDS

from .common import DEFAULT_LIMIT, MAX_LIMIT

_TITLE = validate.Length(min=1, max=TITLE_MAX_LENGTH)
_DESCRIPTION = validate.Length(max=DESCRIPTION_MAX_LENGTH)


class TodoCreateSchema(Schema):
    """Payload for creating a todo."""

    title = fields.String(required=True, validate=_TITLE)
    description = fields.String(load_default=None, allow_none=True, validate=_DESCRIPTION)
    completed = fields.Boolean(load_default=False)

    @post_load
    def strip_title(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        data["title"] = data["title"].strip()
        return data


class TodoUpdateSchema(Schema):
    """Partial update payload; absent keys are left untouched."""

    title = fields.String(validate=_TITLE)
    description = fields.String(allow_none=True, validate=_DESCRIPTION)
    completed = fields.Boolean()

    @post_load
    def strip_title(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        if "title" in data:
            data["title"] = data["title"].strip()
        return data


class TodoQuerySchema(Schema):
    """Listing query string."""

    class Meta:
        unknown = EXCLUDE

    search = fields.String(load_default=None)
    completed = fields.Boolean(load_default=None)
    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    limit = fields.Integer(load_default=DEFAULT_LIMIT, validate=validate.Range(min=1, max=MAX_LIMIT))
    sort_by = fields.String(
        data_key="sortBy", load_default="createdAt", validate=validate.OneOf(SORTABLE_FIELDS)
    )
    sort_order = fields.String(
        data_key="sortOrder", load_default="desc", validate=validate.OneOf(SORT_ORDERS)
    )


class TodoBatchUpdateSchema(Schema):
    """``{"ids": [...], "data": {...}}`` for bulk updates."""

    ids = fields.List(fields.Integer(strict=True), required=True, validate=validate.Length(min=1))
    data = fields.Nested(TodoUpdateSchema, required=True)


class TodoBatchDeleteSchema(Schema):
    """``{"ids": [...]}`` for bulk deletes."""

    ids = fields.List(fields.Integer(strict=True), required=True, validate=validate.Length(min=1))


class TodoSchema(Schema):
    """Public representation of a todo."""

    id = fields.Integer(required=True)
    user_id = fields.Integer(required=True, data_key="userId")
    title = fields.String(required=True)
    description = fields.String(allow_none=True)
    completed = fields.Boolean(required=True)
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")


class TodoStatsSchema(Schema):
    """Completion statistics."""

    total = fields.Integer(required=True)
    completed = fields.Integer(required=True)
    pending = fields.Integer(required=True)
    completion_rate = fields.Float(required=True, data_key="completionRate")


class BatchResultSchema(Schema):
    count = fields.Integer(required=True)

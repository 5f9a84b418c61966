"""Todo endpoints, all scoped to the authenticated user."""

from __future__ import annotations

from flask import Blueprint, request

from todo_api.api.deps import (
    build_todo_service,
    current_user_id,
    empty_response,
    json_body,
    json_response,
    require_auth,
    timing,
)
from todo_api.schemas import (
    BatchResultSchema,
    TodoBatchDeleteSchema,
    TodoBatchUpdateSchema,
    TodoCreateSchema,
    TodoQuerySchema,
    TodoSchema,
    TodoStatsSchema,
    TodoUpdateSchema,
    build_meta,
)
from todo_api.services.todos.dto import TodoCreateIn, TodoQueryIn, TodoUpdateIn

bp = Blueprint("todos", __name__, url_prefix="/todos")

todo_schema = TodoSchema()
todo_list_schema = TodoSchema(many=True)
todo_create_schema = TodoCreateSchema()
todo_update_schema = TodoUpdateSchema()
todo_query_schema = TodoQuerySchema()
batch_update_schema = TodoBatchUpdateSchema()
batch_delete_schema = TodoBatchDeleteSchema()
batch_result_schema = BatchResultSchema()
stats_schema = TodoStatsSchema()


@bp.post("")
@require_auth
@timing
def create_todo():
    """Create a todo for the caller."""

    payload = todo_create_schema.load(json_body())
    todo = build_todo_service().create(TodoCreateIn(**payload), current_user_id())
    return json_response({"data": todo_schema.dump(todo)}, status=201)


@bp.get("")
@require_auth
@timing
def list_todos():
    """Search, filter, sort and paginate the caller's todos."""

    query = todo_query_schema.load(request.args)
    page = build_todo_service().find_all(TodoQueryIn(**query), current_user_id())
    meta = build_meta(total=page.total, page=page.page, limit=page.limit)
    return json_response({"data": todo_list_schema.dump(page.items), "meta": meta})


@bp.get("/statistics")
@require_auth
@timing
def statistics():
    """Completion statistics for the caller."""

    stats = build_todo_service().get_statistics(current_user_id())
    return json_response({"data": stats_schema.dump(stats)})


@bp.patch("/batch")
@require_auth
@timing
def update_batch():
    """Apply one partial update to several todos, all or nothing."""

    payload = batch_update_schema.load(json_body())
    result = build_todo_service().update_many(
        payload["ids"], TodoUpdateIn(changes=payload["data"]), current_user_id()
    )
    return json_response({"data": batch_result_schema.dump(result)})


@bp.delete("/batch")
@require_auth
@timing
def delete_batch():
    """Delete several todos, all or nothing."""

    payload = batch_delete_schema.load(json_body())
    result = build_todo_service().delete_many(payload["ids"], current_user_id())
    return json_response({"data": batch_result_schema.dump(result)})


@bp.get("/<int:todo_id>")
@require_auth
@timing
def get_todo(todo_id: int):
    todo = build_todo_service().find_one(todo_id, current_user_id())
    return json_response({"data": todo_schema.dump(todo)})


@bp.patch("/<int:todo_id>")
@require_auth
@timing
def update_todo(todo_id: int):
    """Partially update one of the caller's todos."""

    payload = todo_update_schema.load(json_body())
    todo = build_todo_service().update(todo_id, current_user_id(), TodoUpdateIn(changes=payload))
    return json_response({"data": todo_schema.dump(todo)})


@bp.delete("/<int:todo_id>")
@require_auth
@timing
def delete_todo(todo_id: int):
    build_todo_service().remove(todo_id, current_user_id())
    return empty_response()

"""
Tasks blueprint. Every route requires an access token and only ever touches
the caller's own tasks; another user's task is reported as 404 so task ids
of other accounts cannot be probed.
"""
from __future__ import annotations

from typing import List, Tuple

from flask import Blueprint, request, jsonify, abort, g

from models import storage
from models.base_model import utcnow
from models.task import Task, TASK_STATUSES
from models.schemas.task import TaskCreateSchema, TaskUpdateSchema, TaskOutSchema
from utils.decorators import jwt_required

bp = Blueprint("tasks", __name__)

# Schemas
task_create_schema = TaskCreateSchema()
task_update_schema = TaskUpdateSchema()
task_out_schema = TaskOutSchema()
tasks_out_schema = TaskOutSchema(many=True)

# Sorting allowlist: API field -> SQLAlchemy column
SORT_COLUMNS = {
    "title": Task.title,
    "status": Task.status,
    "priority": Task.priority,
    "due_date": Task.due_date,
    "created_at": Task.created_at,
    "updated_at": Task.updated_at,
}

MAX_LIMIT = 100


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", "20"))
        page = max(page, 1)
        limit = max(1, min(limit, MAX_LIMIT))
        return page, limit
    except ValueError:
        abort(400, description="page and limit must be integers")


def parse_sort() -> List:
    sort_param = request.args.get("sort", "-created_at")
    fields = [s.strip() for s in sort_param.split(",") if s.strip()]
    order_by = []
    for f in fields:
        desc = f.startswith("-")
        key = f[1:] if desc else f
        col = SORT_COLUMNS.get(key)
        if col is None:
            abort(400, description=f"Unsupported sort field: {key}")
        order_by.append(col.desc() if desc else col.asc())
    return order_by if order_by else [Task.created_at.desc()]


def _owned_task_or_404(task_id: str) -> Task:
    session = storage.get_session()
    task = (
        session.query(Task)
        .filter(Task.id == task_id, Task.user_id == g.current_user_id)
        .first()
    )
    if not task:
        abort(404)
    return task


def _apply_status(task: Task, status: str) -> None:
    """completed_at is set while a task is done and cleared otherwise."""
    if status == "done" and task.status != "done":
        task.completed_at = utcnow()
    elif status != "done":
        task.completed_at = None
    task.status = status


@bp.post("/tasks")
@jwt_required()
def create_task():
    """
    Create a task owned by the caller
    ---
    tags:
      - Tasks
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            title: { type: string, maxLength: 255 }
            description: { type: string }
            status: { type: string, enum: [todo, in-progress, done] }
            priority: { type: string, enum: [low, medium, high] }
            due_date: { type: string, format: date-time }
    responses:
      201:
        description: Created
      400:
        description: Validation error
      401:
        description: Unauthorized
    """
    payload = request.get_json(silent=True) or {}
    data = task_create_schema.load(payload)

    task = Task(
        user_id=g.current_user_id,
        title=data["title"].strip(),
        description=data.get("description"),
        priority=data.get("priority", "medium"),
        due_date=data.get("due_date"),
        status="todo",
    )
    _apply_status(task, data.get("status", "todo"))

    storage.new(task)
    storage.save()
    return jsonify({"data": task_out_schema.dump(task)}), 201


@bp.get("/tasks")
@jwt_required()
def list_tasks():
    """
    List the caller's tasks with pagination, sorting and a status filter
    ---
    tags:
      - Tasks
    security:
      - Bearer: []
    parameters:
      - in: query
        name: page
        type: integer
        default: 1
      - in: query
        name: limit
        type: integer
        default: 20
      - in: query
        name: sort
        type: string
        description: "Comma-separated fields; prefix with '-' for desc. Allowed: title, status, priority, due_date, created_at, updated_at"
        default: "-created_at"
      - in: query
        name: status
        type: string
        enum: [todo, in-progress, done]
    responses:
      200:
        description: List of tasks
      401:
        description: Unauthorized
    """
    session = storage.get_session()
    page, limit = parse_pagination()
    order_by = parse_sort()

    query = session.query(Task).filter(Task.user_id == g.current_user_id)
    status = request.args.get("status")
    if status:
        if status not in TASK_STATUSES:
            abort(400, description=f"Unsupported status: {status}")
        query = query.filter(Task.status == status)

    total = query.count()
    rows = query.order_by(*order_by).offset((page - 1) * limit).limit(limit).all()
    return jsonify(
        {
            "data": tasks_out_schema.dump(rows),
            "meta": {"page": page, "limit": limit, "total": total},
        }
    )


@bp.get("/tasks/<task_id>")
@jwt_required()
def get_task(task_id: str):
    """
    Get one of the caller's tasks
    ---
    tags:
      - Tasks
    security:
      - Bearer: []
    parameters:
      - in: path
        name: task_id
        type: string
        required: true
    responses:
      200:
        description: Task found
      404:
        description: Not found
    """
    task = _owned_task_or_404(task_id)
    return jsonify({"data": task_out_schema.dump(task)})


@bp.route("/tasks/<task_id>", methods=["PUT", "PATCH"])
@jwt_required()
def update_task(task_id: str):
    """
    Update one of the caller's tasks (partial; PATCH is accepted as an alias of PUT)
    ---
    tags:
      - Tasks
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: task_id
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
    responses:
      200:
        description: Updated
      400:
        description: Validation error
      404:
        description: Not found
    """
    task = _owned_task_or_404(task_id)

    payload = request.get_json(silent=True) or {}
    data = task_update_schema.load(payload)

    if "title" in data:
        task.title = data["title"].strip()
    for field in ["description", "priority", "due_date"]:
        if field in data:
            setattr(task, field, data[field])
    if "status" in data:
        _apply_status(task, data["status"])

    storage.new(task)
    storage.save()
    return jsonify({"data": task_out_schema.dump(task)})


@bp.patch("/tasks/<task_id>/complete")
@jwt_required()
def complete_task(task_id: str):
    """
    Mark one of the caller's tasks as done
    ---
    tags:
      - Tasks
    security:
      - Bearer: []
    parameters:
      - in: path
        name: task_id
        type: string
        required: true
    responses:
      200:
        description: Completed
      404:
        description: Not found
    """
    task = _owned_task_or_404(task_id)
    _apply_status(task, "done")
    storage.new(task)
    storage.save()
    return jsonify({"data": task_out_schema.dump(task)})


@bp.delete("/tasks/<task_id>")
@jwt_required()
def delete_task(task_id: str):
    """
    Delete one of the caller's tasks
    ---
    tags:
      - Tasks
    security:
      - Bearer: []
    parameters:
      - in: path
        name: task_id
        type: string
        required: true
    responses:
      204:
        description: Deleted
      404:
        description: Not found
    """
    task = _owned_task_or_404(task_id)
    storage.delete(task)
    storage.save()
    return ("", 204)

from __future__ import annotations

import math
from typing import Tuple

from flask import Blueprint, request, jsonify, abort, g

from models import storage
from models.task import Task, TASK_STATUSES
from models.schemas.task import TaskCreateSchema, TaskUpdateSchema, TaskOutSchema
from utils.decorators import jwt_required

bp = Blueprint("tasks", __name__)

# Schemas
task_create_schema = TaskCreateSchema()
task_update_schema = TaskUpdateSchema()
task_out_schema = TaskOutSchema()
tasks_out_schema = TaskOutSchema(many=True)

DEFAULT_LIMIT = 10
MAX_LIMIT = 100
# OFFSET is bound as a signed 64-bit integer
MAX_OFFSET = 2 ** 63 - 1


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", str(DEFAULT_LIMIT)))
    except ValueError:
        abort(400, description="page and limit must be integers")
    page = max(page, 1)
    limit = max(1, min(limit, MAX_LIMIT))
    if (page - 1) * limit > MAX_OFFSET:
        abort(400, description="page is out of range")
    return page, limit


def apply_filters(query):
    status = request.args.get("status")
    search = request.args.get("search")

    if status:
        if status not in TASK_STATUSES:
            abort(400, description=f"Unsupported status: {status}. Allowed: {', '.join(TASK_STATUSES)}")
        query = query.filter(Task.status == status)

    if search and search.strip():
        # Case-insensitive substring match on the title; LIKE wildcards in the input are literal
        term = search.strip().casefold().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        query = query.filter(Task.title_folded.like(f"%{term}%", escape="\\"))

    return query


def get_owned_task_or_404(task_id: int) -> Task:
    """Another user's task is reported exactly like a missing one."""
    task = storage.get(Task, task_id)
    if not task or task.user_id != g.current_user_id:
        abort(404, description="Task not found")
    return task


@bp.get("/tasks")
@jwt_required()
def list_tasks():
    """
    List the caller's tasks, newest first, with pagination, status filter and title search
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
        default: 10
        maximum: 100
      - in: query
        name: status
        type: string
        enum: [OPEN, DONE]
      - in: query
        name: search
        type: string
        description: "Case-insensitive substring search on title"
    responses:
      200:
        description: Page of tasks
      400:
        description: Bad pagination or filter value
      401:
        description: Unauthorized
    """
    session = storage.get_session()
    page, limit = parse_pagination()

    query = session.query(Task).filter(Task.user_id == g.current_user_id)
    query = apply_filters(query)

    total = query.count()
    rows = (
        query.order_by(Task.created_at.desc(), Task.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return jsonify(
        {
            "data": tasks_out_schema.dump(rows),
            "meta": {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": math.ceil(total / limit),
            },
        }
    )


@bp.post("/tasks")
@jwt_required()
def create_task():
    """
    Create a task (status starts as OPEN)
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
          required: [title]
          properties:
            title: { type: string, maxLength: 255 }
            description: { type: string }
    responses:
      201:
        description: Created
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = task_create_schema.load(payload)

    task = Task(
        title=data["title"],
        description=data.get("description"),
        user_id=g.current_user_id,
    )
    task.save()

    return jsonify({"data": task_out_schema.dump(task)}), 201


@bp.get("/tasks/<int:task_id>")
@jwt_required()
def get_task(task_id: int):
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
        type: integer
        required: true
    responses:
      200:
        description: Task found
      404:
        description: Not found
    """
    task = get_owned_task_or_404(task_id)
    return jsonify({"data": task_out_schema.dump(task)})


@bp.patch("/tasks/<int:task_id>")
@jwt_required()
def update_task(task_id: int):
    """
    Update a task (partial)
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
        type: integer
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            title: { type: string }
            description: { type: string }
            status: { type: string, enum: [OPEN, DONE] }
    responses:
      200:
        description: Updated
      404:
        description: Not found
      422:
        description: Validation error
    """
    task = get_owned_task_or_404(task_id)

    payload = request.get_json(silent=True) or {}
    data = task_update_schema.load(payload)

    for field in ["title", "description", "status"]:
        if field in data:
            setattr(task, field, data[field])
    task.save()

    return jsonify({"data": task_out_schema.dump(task)})


@bp.delete("/tasks/<int:task_id>")
@jwt_required()
def delete_task(task_id: int):
    """
    Delete a task
    ---
    tags:
      - Tasks
    security:
      - Bearer: []
    parameters:
      - in: path
        name: task_id
        type: integer
        required: true
    responses:
      204:
        description: Deleted
      404:
        description: Not found
    """
    task = get_owned_task_or_404(task_id)
    task.delete()
    storage.save()
    return ("", 204)


@bp.post("/tasks/<int:task_id>/toggle")
@jwt_required()
def toggle_task(task_id: int):
    """
    Flip a task between OPEN and DONE
    ---
    tags:
      - Tasks
    security:
      - Bearer: []
    parameters:
      - in: path
        name: task_id
        type: integer
        required: true
    responses:
      200:
        description: Updated task
      404:
        description: Not found
    """
    task = get_owned_task_or_404(task_id)
    task.toggle()
    task.save()
    return jsonify({"data": task_out_schema.dump(task)})

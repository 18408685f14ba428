"""Admin API routes — category and task management, household settings."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from aiohttp import web

from harmony.models import Frequency, Priority
from webapp.helpers import (
    category_payload,
    get_engine,
    get_sessions,
    match_uuid,
    outcome_response,
    read_json,
    require_admin,
    require_fields,
)

routes = web.RouteTableDef()


def _task_fields(body: dict) -> dict:
    """Convert JSON task fields to engine values. Raises ValueError or TypeError on bad input."""
    fields = {}
    for name in ("title", "description"):
        if name in body:
            fields[name] = str(body[name])
    if "points" in body:
        points = int(body["points"])
        if points <= 0:
            raise ValueError("points must be positive")
        fields["points"] = points
    if "priority" in body:
        fields["priority"] = Priority(body["priority"])
    if "frequency" in body:
        fields["frequency"] = Frequency(body["frequency"])
    if "due_date" in body:
        fields["due_date"] = datetime.fromisoformat(body["due_date"]) if body["due_date"] else None
    if "assigned_to" in body:
        fields["assigned_to"] = UUID(str(body["assigned_to"])) if body["assigned_to"] else None
    return fields


# ── Categories ──────────────────────────────────────────


@routes.post("/api/categories")
async def add_category(request: web.Request) -> web.Response:
    require_admin(request)
    body = await read_json(request)
    require_fields(body, "name")
    engine = get_engine(request)
    category = await engine.add_category(
        body["name"], body.get("icon", "house.fill"), body.get("color", "#4ECDC4")
    )
    return web.json_response(category_payload(category, engine), status=201)


@routes.put("/api/categories/{category_id}")
async def update_category(request: web.Request) -> web.Response:
    require_admin(request)
    body = await read_json(request)
    outcome = await get_engine(request).update_category(
        match_uuid(request, "category_id"),
        name=body.get("name"),
        icon=body.get("icon"),
        color=body.get("color"),
    )
    return outcome_response(outcome)


@routes.delete("/api/categories/{category_id}")
async def delete_category(request: web.Request) -> web.Response:
    require_admin(request)
    outcome = await get_engine(request).delete_category(match_uuid(request, "category_id"))
    return outcome_response(outcome)


# ── Tasks ───────────────────────────────────────────────


@routes.post("/api/categories/{category_id}/tasks")
async def add_task(request: web.Request) -> web.Response:
    require_admin(request)
    body = await read_json(request)
    require_fields(body, "title")
    try:
        fields = _task_fields(body)
    except (TypeError, ValueError) as e:
        return web.json_response({"error": str(e)}, status=400)

    task = await get_engine(request).add_task(match_uuid(request, "category_id"), **fields)
    if task is None:
        return web.json_response({"error": "Category not found"}, status=404)
    return web.json_response(task.to_dict(), status=201)


@routes.put("/api/categories/{category_id}/tasks/{task_id}")
async def update_task(request: web.Request) -> web.Response:
    require_admin(request)
    body = await read_json(request)
    try:
        fields = _task_fields(body)
        new_category_id = UUID(str(body["category_id"])) if body.get("category_id") else None
    except (TypeError, ValueError) as e:
        return web.json_response({"error": str(e)}, status=400)

    engine = get_engine(request)
    task_id = match_uuid(request, "task_id")
    outcome = await engine.update_task(
        task_id, match_uuid(request, "category_id"), new_category_id, **fields
    )
    if outcome:
        return outcome_response(outcome, task=engine.tasks[task_id].to_dict())
    return outcome_response(outcome)


@routes.delete("/api/categories/{category_id}/tasks/{task_id}")
async def delete_task(request: web.Request) -> web.Response:
    require_admin(request)
    outcome = await get_engine(request).delete_task(
        match_uuid(request, "task_id"), match_uuid(request, "category_id")
    )
    return outcome_response(outcome)


# ── Settings ────────────────────────────────────────────


@routes.post("/api/settings/daily-reset")
async def daily_reset(request: web.Request) -> web.Response:
    performed = await get_engine(request).check_and_perform_daily_reset()
    return web.json_response({"ok": True, "performed": performed})


@routes.post("/api/settings/clear")
async def clear_all(request: web.Request) -> web.Response:
    await get_engine(request).clear_all_data()
    await get_sessions(request).discard()
    return web.json_response({"ok": True})


@routes.post("/api/settings/reset-defaults")
async def reset_defaults(request: web.Request) -> web.Response:
    engine = get_engine(request)
    await engine.reset_to_defaults()
    await get_sessions(request).discard()
    return web.json_response({
        "ok": True,
        "users": len(engine.users),
        "categories": len(engine.categories),
    })

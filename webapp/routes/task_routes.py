"""Chore routes — browse categories, claim, unclaim and complete tasks."""

from __future__ import annotations

from aiohttp import web

from webapp.helpers import (
    category_payload,
    get_engine,
    match_uuid,
    outcome_response,
    user_payload,
)

routes = web.RouteTableDef()


@routes.get("/api/categories")
async def list_categories(request: web.Request) -> web.Response:
    engine = get_engine(request)
    return web.json_response({
        "categories": [category_payload(c, engine) for c in engine.categories.values()],
    })


@routes.get("/api/categories/{category_id}")
async def get_category(request: web.Request) -> web.Response:
    engine = get_engine(request)
    category = engine.categories.get(match_uuid(request, "category_id"))
    if category is None:
        return web.json_response({"error": "Category not found"}, status=404)
    return web.json_response(category_payload(category, engine))


@routes.post("/api/categories/{category_id}/tasks/{task_id}/claim")
async def claim_task(request: web.Request) -> web.Response:
    engine = get_engine(request)
    task_id = match_uuid(request, "task_id")
    outcome = await engine.claim_task(task_id, match_uuid(request, "category_id"))
    if outcome:
        return outcome_response(outcome, task=engine.tasks[task_id].to_dict())
    return outcome_response(outcome)


@routes.post("/api/categories/{category_id}/tasks/{task_id}/unclaim")
async def unclaim_task(request: web.Request) -> web.Response:
    engine = get_engine(request)
    task_id = match_uuid(request, "task_id")
    outcome = await engine.unclaim_task(task_id, match_uuid(request, "category_id"))
    if outcome:
        return outcome_response(outcome, task=engine.tasks[task_id].to_dict())
    return outcome_response(outcome)


@routes.post("/api/categories/{category_id}/tasks/{task_id}/complete")
async def complete_task(request: web.Request) -> web.Response:
    engine = get_engine(request)
    task_id = match_uuid(request, "task_id")
    user = engine.current_user
    badges_before = set(user.badges_earned) if user else set()

    outcome = await engine.complete_task(task_id, match_uuid(request, "category_id"))
    if not outcome:
        return outcome_response(outcome)

    user = engine.current_user
    return outcome_response(
        outcome,
        task=engine.tasks[task_id].to_dict(),
        user=user_payload(user),
        new_badges=[b for b in user.badges_earned if b not in badges_before],
    )

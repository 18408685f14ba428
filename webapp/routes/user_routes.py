"""User routes — profiles, selection, stats, badges and the leaderboard."""

from __future__ import annotations

from aiohttp import web

from harmony.models import LeaderboardPeriod, User
from webapp.helpers import (
    get_engine,
    match_uuid,
    outcome_response,
    read_json,
    require_admin,
    require_fields,
    user_payload,
)

routes = web.RouteTableDef()

PROFILE_FIELDS = ("name", "avatar", "color_theme")

# Editing these needs an admin.
PRIVILEGED_FIELDS = (
    "total_points",
    "current_streak",
    "longest_streak",
    "tasks_completed",
    "badges_earned",
    "is_admin",
)

COUNTER_FIELDS = ("total_points", "current_streak", "longest_streak", "tasks_completed")


def _valid_user_fields(body: dict) -> bool:
    if any(not isinstance(body[k], str) for k in PROFILE_FIELDS if k in body):
        return False
    for k in COUNTER_FIELDS:
        if k in body and (type(body[k]) is not int or body[k] < 0):
            return False
    if "badges_earned" in body:
        badges = body["badges_earned"]
        if not isinstance(badges, list) or not all(isinstance(b, str) for b in badges):
            return False
    if "is_admin" in body and not isinstance(body["is_admin"], bool):
        return False
    return True


@routes.get("/api/users")
async def list_users(request: web.Request) -> web.Response:
    engine = get_engine(request)
    return web.json_response({"users": [user_payload(u) for u in engine.users.values()]})


@routes.post("/api/users")
async def create_user(request: web.Request) -> web.Response:
    body = await read_json(request)
    require_fields(body, "name", "avatar", "color_theme")
    if not _valid_user_fields({k: body[k] for k in PROFILE_FIELDS}):
        return web.json_response({"error": "Invalid user fields"}, status=400)
    user = await get_engine(request).create_user(
        body["name"], body["avatar"], body["color_theme"]
    )
    return web.json_response(user_payload(user), status=201)


@routes.put("/api/users/{user_id}")
async def update_user(request: web.Request) -> web.Response:
    engine = get_engine(request)
    user_id = match_uuid(request, "user_id")
    body = await read_json(request)

    existing = engine.users.get(user_id)
    if existing is None:
        return web.json_response({"error": "User not found"}, status=404)

    if any(k in body for k in PRIVILEGED_FIELDS):
        require_admin(request)
    if not _valid_user_fields(body):
        return web.json_response({"error": "Invalid user fields"}, status=400)

    data = existing.to_dict()
    data.update({k: body[k] for k in PROFILE_FIELDS + PRIVILEGED_FIELDS if k in body})
    updated = User.from_dict(data)

    outcome = await engine.update_user(updated)
    if outcome:
        return outcome_response(outcome, user=user_payload(engine.users[user_id]))
    return outcome_response(outcome)


@routes.post("/api/users/{user_id}/select")
async def select_user(request: web.Request) -> web.Response:
    engine = get_engine(request)
    outcome = await engine.select_user(match_uuid(request, "user_id"))
    if engine.current_user is not None:
        return outcome_response(outcome, user=user_payload(engine.current_user))
    return outcome_response(outcome)


@routes.post("/api/logout")
async def logout(request: web.Request) -> web.Response:
    get_engine(request).logout()
    return web.json_response({"ok": True})


@routes.get("/api/me")
async def get_me(request: web.Request) -> web.Response:
    user = get_engine(request).current_user
    if user is None:
        return web.json_response({"error": "No user selected"}, status=404)
    return web.json_response(user_payload(user))


@routes.get("/api/users/{user_id}/stats")
async def get_stats(request: web.Request) -> web.Response:
    stats = get_engine(request).get_user_stats(match_uuid(request, "user_id"))
    if stats is None:
        return web.json_response({"error": "User not found"}, status=404)
    return web.json_response(stats.to_dict())


@routes.get("/api/users/{user_id}/badges")
async def get_badges(request: web.Request) -> web.Response:
    badges = get_engine(request).badges_for_user(match_uuid(request, "user_id"))
    if badges is None:
        return web.json_response({"error": "User not found"}, status=404)
    return web.json_response({
        "badges": [badge.to_dict(unlocked=unlocked) for badge, unlocked in badges],
        "unlocked": sum(1 for _, unlocked in badges if unlocked),
    })


@routes.post("/api/users/{user_id}/reset-streak")
async def reset_streak(request: web.Request) -> web.Response:
    require_admin(request)
    outcome = await get_engine(request).reset_streak(match_uuid(request, "user_id"))
    return outcome_response(outcome)


@routes.get("/api/leaderboard")
async def get_leaderboard(request: web.Request) -> web.Response:
    try:
        period = LeaderboardPeriod(request.query.get("period", LeaderboardPeriod.ALL_TIME.value))
    except ValueError:
        return web.json_response({"error": "Unknown period"}, status=400)
    entries = get_engine(request).get_leaderboard(period)
    return web.json_response({
        "period": period.value,
        "entries": [e.to_dict() for e in entries],
    })

"""Shared request helpers: app keys, id parsing, outcome-to-response mapping."""

from __future__ import annotations

import json
from uuid import UUID

from aiohttp import web
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from harmony.engine import GamificationEngine
from harmony.models import Category, Outcome, User
from harmony.session import SessionManager

ENGINE_KEY = web.AppKey("engine", GamificationEngine)
SESSIONS_KEY = web.AppKey("sessions", SessionManager)
SCHEDULER_KEY = web.AppKey("scheduler", AsyncIOScheduler)

_OUTCOME_ERRORS = {
    Outcome.NOT_FOUND: ("Not found", 404),
    Outcome.NO_CURRENT_USER: ("No user selected", 409),
}


def get_engine(request: web.Request) -> GamificationEngine:
    return request.app[ENGINE_KEY]


def get_sessions(request: web.Request) -> SessionManager:
    return request.app[SESSIONS_KEY]


def _bad_request(message: str) -> web.HTTPBadRequest:
    return web.HTTPBadRequest(
        text=json.dumps({"error": message}), content_type="application/json"
    )


def match_uuid(request: web.Request, name: str) -> UUID:
    try:
        return UUID(request.match_info[name])
    except ValueError:
        raise _bad_request(f"Invalid {name}")


def body_uuid(body: dict, name: str) -> UUID:
    try:
        return UUID(str(body[name]))
    except (KeyError, ValueError):
        raise _bad_request(f"Invalid {name}")


async def read_json(request: web.Request) -> dict:
    try:
        body = await request.json()
    except json.JSONDecodeError:
        raise _bad_request("Malformed JSON")
    if not isinstance(body, dict):
        raise _bad_request("Expected a JSON object")
    return body


def require_fields(body: dict, *names: str) -> None:
    missing = [n for n in names if not body.get(n)]
    if missing:
        raise _bad_request(f"Missing fields: {', '.join(missing)}")


def require_admin(request: web.Request) -> User:
    user = get_engine(request).current_user
    if user is None or not user.is_admin:
        raise web.HTTPForbidden(text="Admin only")
    return user


def outcome_response(outcome: Outcome, **payload) -> web.Response:
    if outcome is Outcome.OK:
        return web.json_response({"ok": True, **payload})
    message, status = _OUTCOME_ERRORS[outcome]
    return web.json_response({"error": message}, status=status)


def user_payload(user: User) -> dict:
    return {
        **user.to_dict(),
        "level": user.level,
        "progress_to_next_level": user.progress_to_next_level,
    }


def category_payload(category: Category, engine: GamificationEngine) -> dict:
    return {
        **category.to_dict(engine.tasks),
        "completed_count": category.completed_count(engine.tasks),
        "total_count": category.total_count,
        "completion_percentage": category.completion_percentage(engine.tasks),
    }

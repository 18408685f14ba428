"""House session routes — simulated hosting, device pairing and the action log."""

from __future__ import annotations

from aiohttp import web

from webapp.helpers import (
    body_uuid,
    get_engine,
    get_sessions,
    match_uuid,
    outcome_response,
    read_json,
    require_fields,
)

routes = web.RouteTableDef()


def _session_payload(request: web.Request) -> dict:
    session = get_sessions(request).session
    return {
        **session.to_dict(),
        "connected_count": session.connected_count,
        "pending_count": session.pending_count,
    }


@routes.get("/api/session")
async def get_session(request: web.Request) -> web.Response:
    return web.json_response(_session_payload(request))


@routes.post("/api/session/start")
async def start_hosting(request: web.Request) -> web.Response:
    code = await get_sessions(request).start_hosting()
    return web.json_response({"ok": True, "pairing_code": code})


@routes.post("/api/session/stop")
async def stop_hosting(request: web.Request) -> web.Response:
    await get_sessions(request).stop_hosting()
    return web.json_response({"ok": True})


@routes.post("/api/session/pairing-code")
async def regenerate_pairing_code(request: web.Request) -> web.Response:
    code = await get_sessions(request).regenerate_pairing_code()
    return web.json_response({"ok": True, "pairing_code": code})


# ── Devices ─────────────────────────────────────────────


@routes.post("/api/session/devices/simulate")
async def simulate_device(request: web.Request) -> web.Response:
    device = await get_sessions(request).simulate_new_device()
    return web.json_response(device.to_dict(), status=201)


@routes.post("/api/session/devices/samples")
async def add_sample_devices(request: web.Request) -> web.Response:
    await get_sessions(request).add_sample_devices()
    return web.json_response(_session_payload(request))


@routes.post("/api/session/devices/{device_id}/{action:approve|reject|block|disconnect}")
async def device_action(request: web.Request) -> web.Response:
    sessions = get_sessions(request)
    device_id = match_uuid(request, "device_id")
    handler = {
        "approve": sessions.approve_device,
        "reject": sessions.reject_device,
        "block": sessions.block_device,
        "disconnect": sessions.disconnect_device,
    }[request.match_info["action"]]
    return outcome_response(await handler(device_id))


@routes.post("/api/session/devices/{device_id}/assign")
async def assign_device(request: web.Request) -> web.Response:
    body = await read_json(request)
    user_id = body_uuid(body, "user_id")
    if user_id not in get_engine(request).users:
        return web.json_response({"error": "User not found"}, status=404)
    outcome = await get_sessions(request).assign_device_to_user(
        match_uuid(request, "device_id"), user_id
    )
    return outcome_response(outcome)


# ── Simulated client actions ────────────────────────────


def _device_user_name(request: web.Request, device_id) -> str:
    engine = get_engine(request)
    device = get_sessions(request).session.find_device(device_id)
    if device is not None and device.assigned_user_id in engine.users:
        return engine.users[device.assigned_user_id].name
    return "Guest"


@routes.post("/api/session/devices/{device_id}/simulate/{kind:claim|complete}")
async def simulate_task_action(request: web.Request) -> web.Response:
    body = await read_json(request)
    task = get_engine(request).get_task(body_uuid(body, "task_id"))
    if task is None:
        return web.json_response({"error": "Task not found"}, status=404)

    sessions = get_sessions(request)
    device_id = match_uuid(request, "device_id")
    user_name = _device_user_name(request, device_id)
    if request.match_info["kind"] == "claim":
        outcome = await sessions.simulate_claim_task(device_id, task, user_name)
    else:
        outcome = await sessions.simulate_complete_task(device_id, task, user_name)
    return outcome_response(outcome)


@routes.post("/api/session/devices/{device_id}/simulate/create")
async def simulate_create(request: web.Request) -> web.Response:
    body = await read_json(request)
    require_fields(body, "task_name")
    device_id = match_uuid(request, "device_id")
    outcome = await get_sessions(request).simulate_create_task(
        device_id, body["task_name"], _device_user_name(request, device_id)
    )
    return outcome_response(outcome)


@routes.post("/api/session/devices/{device_id}/simulate/assign")
async def simulate_assign(request: web.Request) -> web.Response:
    body = await read_json(request)
    require_fields(body, "task_name", "to_user")
    device_id = match_uuid(request, "device_id")
    outcome = await get_sessions(request).simulate_assign_task(
        device_id, body["task_name"], body["to_user"], _device_user_name(request, device_id)
    )
    return outcome_response(outcome)

"""Tests for the simulated house session: hosting, device pairing and the action log."""
from uuid import uuid4

from harmony.models import Outcome, Task
from harmony.session import (
    MAX_RECENT_ACTIONS,
    DeviceActionType,
    DeviceStatus,
    SessionManager,
    generate_pairing_code,
)


def test_pairing_code_is_four_digits():
    for _ in range(50):
        code = generate_pairing_code()
        assert len(code) == 4
        assert 1000 <= int(code) <= 9999


# ============================================================================
# Hosting
# ============================================================================

async def test_start_hosting(sessions, clock):
    code = await sessions.start_hosting()
    s = sessions.session
    assert s.is_hosting
    assert s.pairing_code == code
    assert s.start_time == clock.now
    assert s.recent_actions[0].details == "Started hosting session"


async def test_stop_hosting_disconnects_everyone(sessions):
    await sessions.start_hosting()
    await sessions.add_sample_devices()
    assert sessions.session.connected_count == 4

    await sessions.stop_hosting()

    s = sessions.session
    assert not s.is_hosting
    assert s.pairing_code == ""
    assert s.start_time is None
    assert all(d.status is DeviceStatus.DISCONNECTED for d in s.devices)


async def test_regenerate_pairing_code(sessions):
    await sessions.start_hosting()
    code = await sessions.regenerate_pairing_code()
    assert sessions.session.pairing_code == code


# ============================================================================
# Devices
# ============================================================================

async def test_new_device_waits_for_approval(sessions):
    await sessions.start_hosting()
    device = await sessions.simulate_new_device()
    assert device.status is DeviceStatus.PENDING
    assert device.pairing_code == sessions.session.pairing_code
    assert sessions.session.pending_count == 1


async def test_approve_device(sessions, clock):
    device = await sessions.simulate_new_device()
    assert await sessions.approve_device(device.id) is Outcome.OK
    assert device.is_approved
    assert device.status is DeviceStatus.CONNECTED
    assert device.connection_time == clock.now
    assert sessions.session.pending_count == 0


async def test_reject_removes_device(sessions):
    device = await sessions.simulate_new_device()
    assert await sessions.reject_device(device.id) is Outcome.OK
    assert sessions.session.find_device(device.id) is None


async def test_block_and_disconnect(sessions):
    await sessions.add_sample_devices()
    first, second = sessions.session.devices[:2]
    await sessions.block_device(first.id)
    await sessions.disconnect_device(second.id)
    assert first.is_blocked and first.status is DeviceStatus.BLOCKED
    assert second.status is DeviceStatus.DISCONNECTED


async def test_unknown_device_is_not_found(sessions):
    device_id = uuid4()
    assert await sessions.approve_device(device_id) is Outcome.NOT_FOUND
    assert await sessions.reject_device(device_id) is Outcome.NOT_FOUND
    assert await sessions.block_device(device_id) is Outcome.NOT_FOUND
    assert await sessions.disconnect_device(device_id) is Outcome.NOT_FOUND
    assert await sessions.assign_device_to_user(device_id, uuid4()) is Outcome.NOT_FOUND


# ============================================================================
# Action log
# ============================================================================

async def test_simulated_actions_are_logged_newest_first(sessions, clock):
    await sessions.add_sample_devices()
    device = sessions.session.devices[0]
    task = Task(title="Wash dishes", category="Kitchen", points=15)

    await sessions.simulate_claim_task(device.id, task, "Emma")
    clock.advance(minutes=10)
    await sessions.simulate_complete_task(device.id, task, "Emma")

    latest, earlier = sessions.session.recent_actions[:2]
    assert latest.action_type is DeviceActionType.COMPLETED_TASK
    assert latest.details == "Completed: Wash dishes (+15 pts)"
    assert earlier.details == "Claimed: Wash dishes"
    assert device.last_activity == clock.now


async def test_assign_and_create_details(sessions):
    await sessions.add_sample_devices()
    device = sessions.session.devices[0]
    user_id = uuid4()
    await sessions.assign_device_to_user(device.id, user_id)

    await sessions.simulate_create_task(device.id, "Clean garage", "Emma")
    await sessions.simulate_assign_task(device.id, "Clean garage", "Mike", "Emma")

    latest, earlier = sessions.session.recent_actions[:2]
    assert latest.details == "Assigned 'Clean garage' to Mike"
    assert latest.user_id == user_id
    assert earlier.details == "Created: Clean garage"


async def test_action_log_is_capped(sessions):
    await sessions.add_sample_devices()
    device = sessions.session.devices[0]
    for i in range(MAX_RECENT_ACTIONS + 15):
        await sessions.simulate_create_task(device.id, f"Task {i}", "Emma")

    actions = sessions.session.recent_actions
    assert len(actions) == MAX_RECENT_ACTIONS
    assert actions[0].details == f"Created: Task {MAX_RECENT_ACTIONS + 14}"


async def test_simulated_action_on_unknown_device(sessions):
    task = Task(title="Sweep", category="Kitchen")
    assert await sessions.simulate_claim_task(uuid4(), task, "Guest") is Outcome.NOT_FOUND
    assert sessions.session.recent_actions == []


async def test_session_survives_reload(sessions, storage, clock):
    await sessions.start_hosting()
    device = await sessions.simulate_new_device()

    reloaded = SessionManager(storage, clock=clock)
    await reloaded.load()

    assert reloaded.session == sessions.session
    assert reloaded.session.find_device(device.id) is not None


async def test_discard_forgets_in_memory_session(sessions, storage):
    await sessions.start_hosting()
    await sessions.add_sample_devices()
    await storage.clear_all()

    await sessions.discard()

    assert sessions.session.devices == []
    assert not sessions.session.is_hosting
    await sessions.simulate_new_device()
    assert len((await storage.load_session()).devices) == 1

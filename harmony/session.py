"""Simulated multi-device house session.

Devices, pairing codes and the action log are fabricated locally; nothing here
talks to another device.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Callable, Mapping
from uuid import UUID, uuid4

from .models import Outcome, Task, decode_dt, decode_id, encode_dt, encode_id, utcnow

if TYPE_CHECKING:
    from .database import Storage

logger = logging.getLogger(__name__)

MAX_RECENT_ACTIONS = 50
HOST_DEVICE_NAME = "TV Host"

SIMULATED_DEVICE_TYPES = ("iPhone", "iPad")
SIMULATED_DEVICE_NAMES = (
    "Emma's iPhone",
    "Mike's iPad",
    "Sarah's iPhone",
    "Alex's iPhone",
    "Guest Device",
)
SAMPLE_DEVICES = (
    ("Emma's iPhone", "iPhone"),
    ("Mike's iPad", "iPad"),
    ("Sarah's iPhone", "iPhone"),
    ("Alex's iPhone", "iPhone"),
)


class DeviceStatus(str, Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    PENDING = "pending"
    BLOCKED = "blocked"


class DeviceActionType(str, Enum):
    CLAIMED_TASK = "claimed_task"
    COMPLETED_TASK = "completed_task"
    CREATED_TASK = "created_task"
    ASSIGNED_TASK = "assigned_task"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


def generate_pairing_code(rng: random.Random | None = None) -> str:
    return str((rng or random).randint(1000, 9999))


@dataclass
class Device:
    name: str
    device_type: str
    id: UUID = field(default_factory=uuid4)
    is_approved: bool = False
    is_blocked: bool = False
    assigned_user_id: UUID | None = None
    status: DeviceStatus = DeviceStatus.PENDING
    connection_time: datetime | None = None
    last_activity: datetime | None = None
    pairing_code: str | None = None

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "device_type": self.device_type,
            "is_approved": self.is_approved,
            "is_blocked": self.is_blocked,
            "assigned_user_id": encode_id(self.assigned_user_id),
            "status": self.status.value,
            "connection_time": encode_dt(self.connection_time),
            "last_activity": encode_dt(self.last_activity),
            "pairing_code": self.pairing_code,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> Device:
        return cls(
            id=UUID(data["id"]),
            name=data["name"],
            device_type=data["device_type"],
            is_approved=bool(data.get("is_approved", False)),
            is_blocked=bool(data.get("is_blocked", False)),
            assigned_user_id=decode_id(data.get("assigned_user_id")),
            status=DeviceStatus(data.get("status", DeviceStatus.PENDING.value)),
            connection_time=decode_dt(data.get("connection_time")),
            last_activity=decode_dt(data.get("last_activity")),
            pairing_code=data.get("pairing_code"),
        )


@dataclass
class DeviceAction:
    device_id: UUID
    device_name: str
    action_type: DeviceActionType
    id: UUID = field(default_factory=uuid4)
    user_id: UUID | None = None
    user_name: str | None = None
    timestamp: datetime = field(default_factory=utcnow)
    details: str = ""

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "device_id": str(self.device_id),
            "device_name": self.device_name,
            "user_id": encode_id(self.user_id),
            "user_name": self.user_name,
            "action_type": self.action_type.value,
            "timestamp": encode_dt(self.timestamp),
            "details": self.details,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> DeviceAction:
        return cls(
            id=UUID(data["id"]),
            device_id=UUID(data["device_id"]),
            device_name=data["device_name"],
            user_id=decode_id(data.get("user_id")),
            user_name=data.get("user_name"),
            action_type=DeviceActionType(data["action_type"]),
            timestamp=decode_dt(data["timestamp"]),
            details=data.get("details", ""),
        )


@dataclass
class HouseSession:
    household_id: str = "HarmonyHome"
    household_name: str = "Harmony Family"
    is_hosting: bool = False
    pairing_code: str = ""
    start_time: datetime | None = None
    devices: list[Device] = field(default_factory=list)
    recent_actions: list[DeviceAction] = field(default_factory=list)

    @property
    def connected_count(self) -> int:
        return sum(1 for d in self.devices if d.status is DeviceStatus.CONNECTED)

    @property
    def pending_count(self) -> int:
        return sum(1 for d in self.devices if d.status is DeviceStatus.PENDING)

    def find_device(self, device_id: UUID) -> Device | None:
        return next((d for d in self.devices if d.id == device_id), None)

    def to_dict(self) -> dict:
        return {
            "household_id": self.household_id,
            "household_name": self.household_name,
            "is_hosting": self.is_hosting,
            "pairing_code": self.pairing_code,
            "start_time": encode_dt(self.start_time),
            "devices": [d.to_dict() for d in self.devices],
            "recent_actions": [a.to_dict() for a in self.recent_actions],
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> HouseSession:
        return cls(
            household_id=data["household_id"],
            household_name=data["household_name"],
            is_hosting=bool(data.get("is_hosting", False)),
            pairing_code=data.get("pairing_code", ""),
            start_time=decode_dt(data.get("start_time")),
            devices=[Device.from_dict(d) for d in data.get("devices", [])],
            recent_actions=[DeviceAction.from_dict(a) for a in data.get("recent_actions", [])],
        )


class SessionManager:
    """Owns the house session record and persists it after every change."""

    def __init__(
        self,
        storage: Storage,
        clock: Callable[[], datetime] = utcnow,
        rng: random.Random | None = None,
    ) -> None:
        self.storage = storage
        self.clock = clock
        self.rng = rng or random.Random()
        self.session = HouseSession()
        self._lock = asyncio.Lock()

    async def load(self) -> None:
        self.session = await self.storage.load_session()

    async def discard(self) -> None:
        """Forget the in-memory session after its stored blob was wiped."""
        async with self._lock:
            self.session = HouseSession()
            logger.info("House session discarded")

    async def _save(self) -> None:
        await self.storage.save_session(self.session)

    def _log(
        self,
        device_id: UUID,
        device_name: str,
        action_type: DeviceActionType,
        details: str,
        user_id: UUID | None = None,
        user_name: str | None = None,
    ) -> DeviceAction:
        action = DeviceAction(
            device_id=device_id,
            device_name=device_name,
            action_type=action_type,
            user_id=user_id,
            user_name=user_name,
            timestamp=self.clock(),
            details=details,
        )
        self.session.recent_actions.insert(0, action)
        del self.session.recent_actions[MAX_RECENT_ACTIONS:]
        return action

    # ── Hosting ───────────────────────────────────────────

    async def start_hosting(self) -> str:
        async with self._lock:
            s = self.session
            s.is_hosting = True
            s.pairing_code = generate_pairing_code(self.rng)
            s.start_time = self.clock()
            self._log(uuid4(), HOST_DEVICE_NAME, DeviceActionType.CONNECTED, "Started hosting session")
            await self._save()
            logger.info("Hosting session %s with code %s", s.household_id, s.pairing_code)
            return s.pairing_code

    async def stop_hosting(self) -> None:
        async with self._lock:
            s = self.session
            s.is_hosting = False
            s.pairing_code = ""
            s.start_time = None
            for device in s.devices:
                device.status = DeviceStatus.DISCONNECTED
            self._log(uuid4(), HOST_DEVICE_NAME, DeviceActionType.DISCONNECTED, "Stopped hosting session")
            await self._save()
            logger.info("Stopped hosting session %s", s.household_id)

    async def regenerate_pairing_code(self) -> str:
        async with self._lock:
            self.session.pairing_code = generate_pairing_code(self.rng)
            await self._save()
            return self.session.pairing_code

    # ── Devices ───────────────────────────────────────────

    async def simulate_new_device(self) -> Device:
        async with self._lock:
            device = Device(
                name=self.rng.choice(SIMULATED_DEVICE_NAMES),
                device_type=self.rng.choice(SIMULATED_DEVICE_TYPES),
                status=DeviceStatus.PENDING,
                pairing_code=self.session.pairing_code,
            )
            self.session.devices.append(device)
            self._log(device.id, device.name, DeviceActionType.CONNECTED, "Requesting to connect")
            await self._save()
            return device

    async def approve_device(self, device_id: UUID) -> Outcome:
        async with self._lock:
            device = self.session.find_device(device_id)
            if device is None:
                return Outcome.NOT_FOUND
            device.is_approved = True
            device.status = DeviceStatus.CONNECTED
            device.connection_time = self.clock()
            self._log(device.id, device.name, DeviceActionType.CONNECTED, "Device approved and connected")
            await self._save()
            return Outcome.OK

    async def reject_device(self, device_id: UUID) -> Outcome:
        async with self._lock:
            if self.session.find_device(device_id) is None:
                return Outcome.NOT_FOUND
            self.session.devices = [d for d in self.session.devices if d.id != device_id]
            await self._save()
            return Outcome.OK

    async def block_device(self, device_id: UUID) -> Outcome:
        async with self._lock:
            device = self.session.find_device(device_id)
            if device is None:
                return Outcome.NOT_FOUND
            device.is_blocked = True
            device.status = DeviceStatus.BLOCKED
            await self._save()
            return Outcome.OK

    async def disconnect_device(self, device_id: UUID) -> Outcome:
        async with self._lock:
            device = self.session.find_device(device_id)
            if device is None:
                return Outcome.NOT_FOUND
            device.status = DeviceStatus.DISCONNECTED
            self._log(device.id, device.name, DeviceActionType.DISCONNECTED, "Device disconnected")
            await self._save()
            return Outcome.OK

    async def assign_device_to_user(self, device_id: UUID, user_id: UUID) -> Outcome:
        async with self._lock:
            device = self.session.find_device(device_id)
            if device is None:
                return Outcome.NOT_FOUND
            device.assigned_user_id = user_id
            await self._save()
            return Outcome.OK

    async def add_sample_devices(self) -> None:
        async with self._lock:
            now = self.clock()
            for name, device_type in SAMPLE_DEVICES:
                self.session.devices.append(
                    Device(
                        name=name,
                        device_type=device_type,
                        is_approved=True,
                        status=DeviceStatus.CONNECTED,
                        connection_time=now,
                    )
                )
            await self._save()

    # ── Simulated actions ─────────────────────────────────

    async def _simulate(
        self,
        device_id: UUID,
        action_type: DeviceActionType,
        details: str,
        user_name: str | None,
    ) -> Outcome:
        async with self._lock:
            device = self.session.find_device(device_id)
            if device is None:
                return Outcome.NOT_FOUND
            self._log(
                device.id,
                device.name,
                action_type,
                details,
                user_id=device.assigned_user_id,
                user_name=user_name,
            )
            device.last_activity = self.clock()
            await self._save()
            return Outcome.OK

    async def simulate_claim_task(self, device_id: UUID, task: Task, user_name: str) -> Outcome:
        return await self._simulate(
            device_id, DeviceActionType.CLAIMED_TASK, f"Claimed: {task.title}", user_name
        )

    async def simulate_complete_task(self, device_id: UUID, task: Task, user_name: str) -> Outcome:
        return await self._simulate(
            device_id,
            DeviceActionType.COMPLETED_TASK,
            f"Completed: {task.title} (+{task.points} pts)",
            user_name,
        )

    async def simulate_create_task(self, device_id: UUID, task_name: str, user_name: str) -> Outcome:
        return await self._simulate(
            device_id, DeviceActionType.CREATED_TASK, f"Created: {task_name}", user_name
        )

    async def simulate_assign_task(
        self, device_id: UUID, task_name: str, to_user: str, user_name: str
    ) -> Outcome:
        return await self._simulate(
            device_id,
            DeviceActionType.ASSIGNED_TASK,
            f"Assigned '{task_name}' to {to_user}",
            user_name,
        )

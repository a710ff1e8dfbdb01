# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
import pytest
from fastapi.testclient import TestClient

from src.config import Settings
from src.database import JsonStorage
from src.main import create_app
from src.models.enums import OperationKind
from src.services.contact_service import ContactStore
from src.services.simulator import FaultPolicy, NoFaultPolicy, SimulatedBackend
from src.services.task_service import TaskStore


class TickingClock:
    """Deterministic clock advancing one second per reading."""

    def __init__(self, start: int = 1_700_000_000_000, step: int = 1000) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> int:
        self.now += self.step
        return self.now


class ScriptedFaultPolicy(FaultPolicy):
    """No latency; fails the next N reads or writes on request."""

    def __init__(self) -> None:
        self.fail_reads = 0
        self.fail_writes = 0
        self.calls: list[OperationKind] = []

    async def delay(self, kind: OperationKind) -> None:
        self.calls.append(kind)

    def should_fail(self, kind: OperationKind) -> bool:
        if kind == OperationKind.READ and self.fail_reads:
            self.fail_reads -= 1
            return True
        if kind == OperationKind.WRITE and self.fail_writes:
            self.fail_writes -= 1
            return True
        return False


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def storage(tmp_path) -> JsonStorage:
    """Storage in a fresh temporary data directory."""
    return JsonStorage(tmp_path / "data")


@pytest.fixture
def contact_store(storage, clock) -> ContactStore:
    return ContactStore(storage, seed_count=0, clock=clock)


@pytest.fixture
def task_store(storage, contact_store, clock) -> TaskStore:
    store = TaskStore(storage, contact_store, clock=clock)
    contact_store.register_cascade(store.delete_for_contact)
    return store


@pytest.fixture
def fault_policy() -> ScriptedFaultPolicy:
    return ScriptedFaultPolicy()


@pytest.fixture
def backend(contact_store, task_store, fault_policy) -> SimulatedBackend:
    """Backend with scripted faults, none by default."""
    return SimulatedBackend(contact_store, task_store, fault_policy)


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        data_dir=tmp_path / "data",
        seed_contact_count=0,
        simulate_faults=False,
        retry_base_delay=0,
        retry_jitter=0,
    )


@pytest.fixture
def app(test_settings, backend):
    return create_app(test_settings, backend=backend)


@pytest.fixture
def client(app):
    """Create a test client running the app lifespan."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def quiet_backend(contact_store, task_store) -> SimulatedBackend:
    return SimulatedBackend(contact_store, task_store, NoFaultPolicy())

"""Shared fixtures and test doubles."""

import asyncio
from typing import Optional
from unittest.mock import AsyncMock, Mock

import pytest

from flagwire import EventEmitter, FlagwireAPI, ProviderMetadata, reset_api
from flagwire.infrastructure.tasks import pending_tasks


class MockProvider:
    """Provider double with optional initialize, events and close."""

    def __init__(
        self,
        name: str = "mock-provider",
        *,
        has_initialize: bool = True,
        fail_on_init: Optional[str] = None,
        enable_events: bool = True,
        fail_on_close: Optional[str] = None,
        gate: Optional[asyncio.Event] = None,
    ):
        self.metadata = ProviderMetadata(name=name)
        self.events = EventEmitter() if enable_events else None
        self.gate = gate

        if has_initialize:
            self.initialize = AsyncMock(side_effect=self._initialize, name=f"{name}.initialize")

        self.on_close = AsyncMock(
            side_effect=RuntimeError(fail_on_close) if fail_on_close else None,
            name=f"{name}.on_close",
        )
        self._fail_on_init = fail_on_init

    async def _initialize(self, context):
        if self.gate is not None:
            await self.gate.wait()
        if self._fail_on_init:
            raise RuntimeError(self._fail_on_init)

    def __repr__(self) -> str:
        return f"MockProvider({self.metadata.name!r})"


class Recorder:
    """Event handler that records the details it receives."""

    def __init__(self):
        self.calls = []

    def __call__(self, details):
        self.calls.append(details)

    @property
    def client_names(self):
        return [details.client_name for details in self.calls]


async def _settle() -> None:
    while True:
        await asyncio.sleep(0)
        tasks = pending_tasks()
        if not tasks:
            return
        await asyncio.wait(tasks)


@pytest.fixture
def settle():
    """Coroutine function that waits for all scheduled background work."""
    return _settle


@pytest.fixture
def logger():
    """Mock logger accepted by SafeLogger."""
    return Mock(spec=["debug", "info", "warning", "error"])


@pytest.fixture
def api(logger):
    """Fresh API instance with a mock logger."""
    return FlagwireAPI(logger=logger)


@pytest.fixture(autouse=True)
def _reset_global_api():
    yield
    reset_api()


@pytest.fixture
def make_provider():
    """Factory for MockProvider instances."""
    return MockProvider


@pytest.fixture
def make_recorder():
    """Factory for Recorder handlers."""
    return Recorder

from __future__ import annotations

from contextlib import ExitStack
from datetime import datetime, timedelta, timezone

import fakeredis
import pytest
from fastapi.testclient import TestClient

from guessgame.config import Settings
from guessgame.main import create_app


class SteppingClock:
    """Deterministic clock: every call is one minute after the previous one."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(minutes=1)):
        self.current = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current += self.step
        return now


@pytest.fixture()
def fake_server() -> fakeredis.FakeServer:
    return fakeredis.FakeServer()


@pytest.fixture()
def make_client(fake_server):
    with ExitStack() as stack:

        def factory(**overrides) -> TestClient:
            app = create_app(
                settings=Settings(**overrides),
                redis_factory=lambda: fakeredis.FakeAsyncRedis(
                    server=fake_server, decode_responses=True
                ),
                clock=SteppingClock(),
            )
            return stack.enter_context(TestClient(app))

        yield factory


@pytest.fixture()
def client(make_client) -> TestClient:
    return make_client()

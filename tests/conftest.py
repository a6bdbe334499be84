import os

import pytest
import pytest_asyncio

# Keep session pauses short for anything built from default constants.
os.environ.setdefault("IRC_POST_JOIN_DELAY_SECONDS", "0")
os.environ.setdefault("IRC_POST_SEND_DELAY_SECONDS", "0")

from tests.fixtures.irc_fixtures import FakeSession, FakeTwitchServer  # noqa: E402


@pytest_asyncio.fixture
async def irc_server():
    """Factory: ``await irc_server(handler)`` returns a started FakeTwitchServer."""
    servers: list[FakeTwitchServer] = []

    async def _make(handler) -> FakeTwitchServer:
        server = FakeTwitchServer(handler)
        await server.start()
        servers.append(server)
        return server

    yield _make
    for server in servers:
        await server.stop()


@pytest.fixture
def fake_session():
    return FakeSession()

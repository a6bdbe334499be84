"""Fake IRC endpoints shared by session, controller and runner tests."""

import asyncio
from collections.abc import Awaitable, Callable

from botpool.irc.session import IRCSession, SendResult

ServerHandler = Callable[[asyncio.StreamReader, asyncio.StreamWriter, list[str]], Awaitable[None]]

WELCOME = b":tmi.twitch.tv 001 alice :Welcome, GLHF!\r\n"
AUTH_FAILED = b":tmi.twitch.tv NOTICE * :Login authentication failed\r\n"
NAMES_END = b":alice.tmi.twitch.tv 366 alice #chan :End of /NAMES list\r\n"


class FakeTwitchServer:
    """Tiny line-based IRC server recording every line clients send."""

    def __init__(self, handler: ServerHandler) -> None:
        self.handler = handler
        self.received: list[str] = []
        self.server: asyncio.Server | None = None
        self.port = 0

    async def start(self) -> None:
        self.server = await asyncio.start_server(self._client, "127.0.0.1", 0)
        self.port = self.server.sockets[0].getsockname()[1]

    async def stop(self) -> None:
        if self.server is not None:
            self.server.close()
            await self.server.wait_closed()

    async def _client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        try:
            await self.handler(reader, writer, self.received)
        except ConnectionError:
            pass
        finally:
            writer.close()

    def session(self, **kwargs) -> IRCSession:
        params = {
            "connect_timeout": 2.0,
            "probe_timeout": 2.0,
            "join_timeout": 1.0,
            "post_join_delay": 0.0,
            "post_send_delay": 0.0,
        }
        params.update(kwargs)
        return IRCSession("127.0.0.1", self.port, **params)


async def read_lines(reader: asyncio.StreamReader, received: list[str], count: int) -> None:
    for _ in range(count):
        raw = await reader.readline()
        if not raw:
            return
        received.append(raw.decode().rstrip("\r\n"))


class FakeSession:
    """Stand-in for IRCSession that records calls and answers from tables."""

    def __init__(self, available: dict[str, bool] | None = None, fail: set[str] | None = None):
        self.available = available or {}
        self.fail = fail or set()
        self.probes: list[str] = []
        self.sends: list[tuple[str, str, str]] = []

    async def probe(self, name: str, token: str) -> bool:
        self.probes.append(name)
        await asyncio.sleep(0)
        return self.available.get(name, True)

    async def send(self, name: str, token: str, channel: str, message: str) -> SendResult:
        self.sends.append((name, channel, message))
        await asyncio.sleep(0)
        if name in self.fail:
            return SendResult(
                ok=False,
                error="could not join channel #" + channel,
                error_type="JoinTimeoutError",
            )
        return SendResult.success()

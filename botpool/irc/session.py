"""Single-use authenticated IRC sessions against the Twitch chat server."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from ..constants import (
    IRC_CONNECT_TIMEOUT_SECONDS,
    IRC_JOIN_TIMEOUT_SECONDS,
    IRC_PORT,
    IRC_POST_JOIN_DELAY_SECONDS,
    IRC_POST_SEND_DELAY_SECONDS,
    IRC_PROBE_READ_BYTES,
    IRC_PROBE_TIMEOUT_SECONDS,
    IRC_SERVER,
)
from ..errors import (
    AuthProbeInconclusiveError,
    ConnectFailedError,
    JoinTimeoutError,
    SessionError,
    WriteFailedError,
)
from ..logs.logger import logger
from .protocol import (
    build_join,
    build_nick,
    build_pass,
    build_pong,
    build_privmsg,
    is_auth_failure,
    is_join_confirmation,
    is_ping,
    is_welcome,
    normalize_channel,
    redact,
)


@dataclass(frozen=True, slots=True)
class SendResult:
    """Outcome of one send; ``error`` text is descriptive, not stable."""

    ok: bool
    error: str | None = None
    error_type: str | None = None

    @classmethod
    def success(cls) -> SendResult:
        return cls(ok=True)

    @classmethod
    def failure(cls, error: BaseException) -> SendResult:
        return cls(
            ok=False,
            error=str(error) or type(error).__name__,
            error_type=type(error).__name__,
        )


class IRCSession:  # pylint: disable=too-many-instance-attributes
    """Fire-and-close IRC interactions.

    Every call opens its own TCP connection, which is owned by that call for
    its whole lifetime and closed before returning. Nothing is pooled, so one
    instance can be shared by any number of concurrent tasks.
    """

    def __init__(
        self,
        host: str = IRC_SERVER,
        port: int = IRC_PORT,
        *,
        connect_timeout: float = IRC_CONNECT_TIMEOUT_SECONDS,
        probe_timeout: float = IRC_PROBE_TIMEOUT_SECONDS,
        probe_read_bytes: int = IRC_PROBE_READ_BYTES,
        join_timeout: float = IRC_JOIN_TIMEOUT_SECONDS,
        post_join_delay: float = IRC_POST_JOIN_DELAY_SECONDS,
        post_send_delay: float = IRC_POST_SEND_DELAY_SECONDS,
    ) -> None:
        self.host = host
        self.port = port
        self.connect_timeout = connect_timeout
        self.probe_timeout = probe_timeout
        self.probe_read_bytes = probe_read_bytes
        self.join_timeout = join_timeout
        self.post_join_delay = post_join_delay
        self.post_send_delay = post_send_delay

    # ------------------------------ probe ------------------------------ #
    async def probe(self, name: str, token: str) -> bool:
        """Check that ``token`` logs ``name`` in. Never raises."""
        logger.log_event("irc", "probe_start", level=logging.DEBUG, user=name)
        try:
            return await asyncio.wait_for(
                self._probe(name, token), timeout=self.probe_timeout
            )
        except TimeoutError:
            logger.log_event(
                "irc",
                "probe_timeout",
                level=logging.WARNING,
                user=name,
                timeout=self.probe_timeout,
            )
        except SessionError as e:
            logger.log_event(
                "irc",
                "probe_failed",
                level=logging.WARNING,
                user=name,
                error=str(e),
                error_type=type(e).__name__,
            )
        return False

    async def _probe(self, name: str, token: str) -> bool:
        reader, writer = await self._open(name)
        try:
            await self._write_line(writer, build_pass(token), name)
            await self._write_line(writer, build_nick(name), name)
            response = await self._read_probe_response(reader)
        finally:
            await self._close(writer, name)
        if is_welcome(response):
            logger.log_event("irc", "probe_ok", user=name)
            return True
        if is_auth_failure(response):
            logger.log_event("irc", "probe_rejected", level=logging.WARNING, user=name)
            return False
        raise AuthProbeInconclusiveError(
            "no welcome from server", data={"received_bytes": len(response)}
        )

    async def _read_probe_response(self, reader: asyncio.StreamReader) -> str:
        buffer = b""
        text = ""
        while len(buffer) < self.probe_read_bytes:
            try:
                chunk = await reader.read(self.probe_read_bytes - len(buffer))
            except OSError as e:
                raise ConnectFailedError(f"connection lost during probe: {e}") from e
            if not chunk:
                break
            buffer += chunk
            text = buffer.decode("utf-8", errors="replace")
            if is_welcome(text) or is_auth_failure(text):
                break
        return text

    # ------------------------------ send ------------------------------- #
    async def send(self, name: str, token: str, channel: str, message: str) -> SendResult:
        """Join ``#channel`` as ``name`` and post ``message`` once.

        Session errors are reported through the returned ``SendResult``.
        """
        channel = normalize_channel(channel)
        logger.log_event(
            "irc", "send_start", level=logging.DEBUG, user=name, channel=channel
        )
        try:
            await self._send(name, token, channel, message)
        except SessionError as e:
            logger.log_event(
                "irc",
                "send_failed",
                level=logging.WARNING,
                user=name,
                channel=channel,
                error=str(e),
                error_type=type(e).__name__,
            )
            return SendResult.failure(e)
        logger.log_event("irc", "send_success", user=name, channel=channel)
        return SendResult.success()

    async def _send(self, name: str, token: str, channel: str, message: str) -> None:
        reader, writer = await self._open(name)
        try:
            await self._write_line(writer, build_pass(token), name)
            await self._write_line(writer, build_nick(name), name)
            await self._write_line(writer, build_join(channel), name)
            await self._await_join(reader, writer, name, channel)
            await asyncio.sleep(self.post_join_delay)
            await self._write_line(writer, build_privmsg(channel, message), name)
            await asyncio.sleep(self.post_send_delay)
        finally:
            await self._close(writer, name)

    async def _await_join(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        name: str,
        channel: str,
    ) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.join_timeout
        while (remaining := deadline - loop.time()) > 0:
            try:
                raw = await asyncio.wait_for(reader.readline(), timeout=remaining)
            except TimeoutError:
                break
            except ValueError:
                # Line longer than the stream limit; skip it.
                continue
            except OSError as e:
                raise ConnectFailedError(
                    f"connection lost while joining #{channel}: {e}"
                ) from e
            if not raw:
                raise JoinTimeoutError(
                    f"could not join channel #{channel}: connection closed by server"
                )
            line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
            logger.log_event(
                "irc", "line_received", level=logging.DEBUG, user=name, line=line
            )
            if is_ping(line):
                await self._write_line(writer, build_pong(line), name)
                continue
            if is_join_confirmation(line):
                logger.log_event(
                    "irc", "join_confirmed", level=logging.DEBUG, user=name, channel=channel
                )
                return
        logger.log_event(
            "irc",
            "join_timeout",
            level=logging.WARNING,
            user=name,
            channel=channel,
            timeout=self.join_timeout,
        )
        raise JoinTimeoutError(
            f"could not join channel #{channel} within {self.join_timeout:g}s"
        )

    # ---------------------------- transport ---------------------------- #
    async def _open(
        self, name: str
    ) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        try:
            return await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=self.connect_timeout,
            )
        except TimeoutError as e:
            raise ConnectFailedError(
                f"timed out connecting to {self.host}:{self.port}",
                data={"user": name},
            ) from e
        except OSError as e:
            raise ConnectFailedError(
                f"could not connect to {self.host}:{self.port}: {e}",
                data={"user": name},
            ) from e

    @staticmethod
    async def _write_line(writer: asyncio.StreamWriter, line: str, name: str) -> None:
        try:
            writer.write(f"{line}\r\n".encode())
            await writer.drain()
        except OSError as e:
            command = line.split(" ", 1)[0]
            raise WriteFailedError(f"failed to send {command}: {e}") from e
        logger.log_event(
            "irc", "line_sent", level=logging.DEBUG, user=name, line=redact(line)
        )

    @staticmethod
    async def _close(writer: asyncio.StreamWriter, name: str) -> None:
        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            logger.log_event(
                "irc", "close_error", level=logging.DEBUG, user=name, error=str(e)
            )

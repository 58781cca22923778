from __future__ import annotations

import asyncio
import contextlib
import logging
import random
import time
import typing
from collections.abc import Awaitable, Callable, Sequence

from cordgate.errors import CordgateError

__all__: Sequence[str] = ("HeartbeatDriver",)

_FIRST_BEAT_RATIO: typing.Final[tuple[float, float]] = (0.05, 0.95)


@typing.final
class HeartbeatDriver:
    """Sends heartbeats every ``interval`` seconds and watches for their acknowledgement.

    The first heartbeat goes out after a random fraction of the interval so that
    many shards reconnecting together do not beat in lockstep. If a heartbeat
    is due while the previous one is still unacknowledged, or a heartbeat cannot be
    sent, the driver calls ``on_timeout`` once and stops.
    """

    def __init__(
        self,
        interval: float,
        send: Callable[[], Awaitable[None]],
        on_timeout: Callable[[], None],
        *,
        logger: logging.Logger,
        first_beat_ratio: float | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("heartbeat interval must be positive")
        if first_beat_ratio is None:
            first_beat_ratio = random.uniform(*_FIRST_BEAT_RATIO)
        if not 0 < first_beat_ratio < 1:
            raise ValueError("first_beat_ratio must be between 0 and 1, exclusive")

        self.interval: float = interval
        self.awaiting_ack: bool = False

        self._send: Callable[[], Awaitable[None]] = send
        self._on_timeout: Callable[[], None] = on_timeout
        self._logger: logging.Logger = logger
        self._first_delay: float = interval * first_beat_ratio
        self._last_sent: float = float("nan")
        self._last_ack: float = float("nan")
        self._task: asyncio.Task[None] | None = None
        self._stopped: bool = False

    @property
    def latency(self) -> float:
        """Seconds between the last heartbeat and its acknowledgement, ``nan`` until one round trip."""
        return self._last_ack - self._last_sent

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self._stopped:
            raise RuntimeError("heartbeat driver was stopped")
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name="heartbeat")

    async def stop(self) -> None:
        self._stopped = True
        if self._task is None:
            return
        task, self._task = self._task, None
        if task is asyncio.current_task():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    def acknowledge(self) -> None:
        self.awaiting_ack = False
        self._last_ack = time.monotonic()
        self._logger.debug("heartbeat ack [latency:%.3fs]", self.latency)

    async def beat(self) -> None:
        if self._stopped:
            return
        # the ack may be handled before the send returns
        self.awaiting_ack = True
        self._last_sent = time.monotonic()
        await self._send()

    async def _run(self) -> None:
        self._logger.debug("starting heartbeat with %ss interval, first in %.3fs", self.interval, self._first_delay)
        await asyncio.sleep(self._first_delay)
        while not self._stopped:
            if self.awaiting_ack:
                self._logger.warning("heartbeat not acknowledged, zombie connection")
                self._on_timeout()
                return
            try:
                await self.beat()
            except (CordgateError, ConnectionError) as exc:
                self._logger.warning("heartbeat send failed: %s", exc)
                self._on_timeout()
                return
            await asyncio.sleep(self.interval)

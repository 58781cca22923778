from __future__ import annotations

import asyncio
import logging
import math

import pytest

from cordgate.errors import TransportClosed
from cordgate.gateway import HeartbeatDriver

_logger = logging.getLogger("tests.heartbeat")


class _Recorder:
    def __init__(self, *, auto_ack: bool = False) -> None:
        self.driver: HeartbeatDriver | None = None
        self.sent = 0
        self.timeouts = 0
        self.auto_ack = auto_ack

    async def send(self) -> None:
        self.sent += 1
        if self.auto_ack and self.driver is not None:
            self.driver.acknowledge()

    def on_timeout(self) -> None:
        self.timeouts += 1


def _driver(recorder: _Recorder, interval: float = 0.02, ratio: float = 0.5) -> HeartbeatDriver:
    driver = HeartbeatDriver(interval, recorder.send, recorder.on_timeout, logger=_logger, first_beat_ratio=ratio)
    recorder.driver = driver
    return driver


@pytest.mark.asyncio
async def test_first_beat_after_fraction_of_interval() -> None:
    recorder = _Recorder()
    driver = _driver(recorder, interval=0.2, ratio=0.25)

    driver.start()
    await asyncio.sleep(0.01)
    assert recorder.sent == 0
    await asyncio.sleep(0.1)
    assert recorder.sent == 1
    assert driver.awaiting_ack

    await driver.stop()


@pytest.mark.asyncio
async def test_acknowledged_heartbeats_continue() -> None:
    recorder = _Recorder(auto_ack=True)
    driver = _driver(recorder)

    driver.start()
    await asyncio.sleep(0.15)
    await driver.stop()

    assert recorder.sent >= 3
    assert recorder.timeouts == 0
    assert driver.latency >= 0


@pytest.mark.asyncio
async def test_missing_ack_times_out_once() -> None:
    recorder = _Recorder()
    driver = _driver(recorder)

    driver.start()
    await asyncio.sleep(0.15)

    assert recorder.sent == 1
    assert recorder.timeouts == 1
    assert not driver.running
    await driver.stop()


@pytest.mark.asyncio
async def test_stop_prevents_further_beats() -> None:
    recorder = _Recorder(auto_ack=True)
    driver = _driver(recorder, ratio=0.1)
    driver.start()
    await asyncio.sleep(0.03)

    await driver.stop()
    sent = recorder.sent
    await driver.beat()
    await asyncio.sleep(0.05)

    assert recorder.sent == sent
    assert not driver.running
    with pytest.raises(RuntimeError):
        driver.start()


@pytest.mark.asyncio
async def test_failed_send_reports_timeout() -> None:
    timeouts = []

    async def send() -> None:
        raise TransportClosed(1006, "gone")

    driver = HeartbeatDriver(0.02, send, lambda: timeouts.append(1), logger=_logger, first_beat_ratio=0.1)
    driver.start()
    await asyncio.sleep(0.05)

    assert not driver.running
    assert timeouts == [1]
    await driver.stop()


def test_latency_unknown_before_first_ack() -> None:
    driver = _driver(_Recorder())

    assert math.isnan(driver.latency)


def test_random_first_beat_within_interval() -> None:
    for _ in range(50):
        driver = HeartbeatDriver(10, _Recorder().send, lambda: None, logger=_logger)
        assert 0 < driver._first_delay < 10


@pytest.mark.parametrize(("interval", "ratio"), [(0, 0.5), (-1, 0.5), (1, 0), (1, 1), (1, 1.5)])
def test_rejects_invalid_settings(interval: float, ratio: float) -> None:
    with pytest.raises(ValueError):
        HeartbeatDriver(interval, _Recorder().send, lambda: None, logger=_logger, first_beat_ratio=ratio)

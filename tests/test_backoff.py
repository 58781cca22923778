from __future__ import annotations

import pytest

from cordgate.gateway import Backoff


def test_exponential_and_capped() -> None:
    backoff = Backoff(base=1, maximum=10, factor=2, jitter=0)

    assert [backoff.next_delay() for _ in range(6)] == [1, 2, 4, 8, 10, 10]


def test_reset() -> None:
    backoff = Backoff(base=0.5, maximum=10, jitter=0)
    backoff.next_delay()
    backoff.next_delay()

    backoff.reset()

    assert backoff.next_delay() == 0.5


def test_attempts_stop_growing_at_maximum() -> None:
    backoff = Backoff(base=1, maximum=4, jitter=0)
    for _ in range(1_000):
        backoff.next_delay()

    assert backoff.next_delay() == 4
    assert backoff.attempts == 2


def test_jitter_stays_in_bounds() -> None:
    backoff = Backoff(base=4, maximum=100, factor=1, jitter=0.25)

    for _ in range(200):
        assert 3 <= backoff.next_delay() <= 5


def test_jitter_never_exceeds_maximum() -> None:
    backoff = Backoff(base=10, maximum=10, jitter=0.5)

    for _ in range(200):
        assert backoff.next_delay() <= 10


@pytest.mark.parametrize(
    "kwargs",
    [{"base": -1}, {"base": 5, "maximum": 1}, {"factor": 0.5}, {"jitter": 1}, {"jitter": -0.1}],
)
def test_rejects_invalid_settings(kwargs: dict[str, float]) -> None:
    with pytest.raises(ValueError):
        Backoff(**kwargs)

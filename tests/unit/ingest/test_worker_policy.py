"""Unit tests for parse worker sizing."""

from __future__ import annotations

from dataclasses import replace

from core.config import SaaqConfig
from ingest.worker_policy import adaptive_worker_count, build_worker_policy


def test_adaptive_worker_count_scales_with_records() -> None:
    """Larger files get a larger share of the cores."""
    assert adaptive_worker_count(50_000, max_workers=16, cpu_count=8) == 2
    assert adaptive_worker_count(500_000, max_workers=16, cpu_count=8) == 4
    assert adaptive_worker_count(2_000_000, max_workers=16, cpu_count=8) == 6
    assert adaptive_worker_count(8_000_000, max_workers=16, cpu_count=8) == 8


def test_adaptive_worker_count_respects_bounds() -> None:
    """Worker count never exceeds the configured maximum and is at least 1."""
    assert adaptive_worker_count(8_000_000, max_workers=4, cpu_count=16) == 4
    assert adaptive_worker_count(10, max_workers=8, cpu_count=1) == 1


def test_build_worker_policy_uses_manual_count() -> None:
    """A configured worker count overrides adaptive sizing."""
    config = replace(SaaqConfig.from_env(), worker_count=3)

    policy = build_worker_policy(config)

    assert policy(10) == 3
    assert policy(10_000_000) == 3

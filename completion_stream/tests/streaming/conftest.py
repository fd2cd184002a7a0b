"""Fixtures for stream facade tests.

Provides a controllable ``perf_counter`` so timing metrics are deterministic.
"""
from __future__ import annotations

import time

import pytest


@pytest.fixture()
def fake_clock(monkeypatch):
    """Provide a perf_counter that advances 5ms on every read.

    ``fake_clock.advance(ms)`` moves time forward explicitly.
    """
    state = {"t": 0.0}

    def perf_counter():
        state["t"] += 0.005
        return state["t"]

    def advance(ms: float):
        state["t"] += ms / 1000.0

    monkeypatch.setattr(time, "perf_counter", perf_counter)
    return type("Clock", (), {"advance": staticmethod(advance)})

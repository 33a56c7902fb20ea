#!/usr/bin/env python3
"""
File: live_data_test.py
Description:
    Unit test the observable live data.

DTR Tracker - A personal daily time record application
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import logging

# Internal libraries
from common.live_data import LiveData

logger = logging.getLogger(__name__)


def test_notify_on_change():
    data = LiveData[int](0)
    received = []
    data.observe(received.append)

    data.value = 1
    data.value = 1
    data.value = 2
    assert received == [1, 2]


def test_bus_mode_repeats():
    data = LiveData[str]("", bus_mode=True)
    received = []
    data.observe(received.append, init_call=True)

    data.value = "hello"
    data.value = "hello"
    assert received == ["", "hello", "hello"]


def test_observers_order_and_removal():
    data = LiveData[int](0)
    calls = []

    def first(value):
        calls.append(("first", value))
        # Removing itself while notified
        data.remove(first)

    def second(value):
        calls.append(("second", value))

    data.observe(first)
    data.observe(second)
    data.observe(second)

    data.value = 1
    data.value = 2
    assert calls == [("first", 1), ("second", 1), ("second", 2)]

#!/usr/bin/env python3
"""
File: conftest.py
Description:
    Declaration of shared fixtures across unit test modules.

DTR Tracker - A personal daily time record application
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import pytest
from pathlib import Path

# Internal libraries
from tests.test_constants import *
from tests.classes_mocks import FakeClock, FailingStorage
from core.punch_machine import PunchStateMachine
from core.record_store import RecordStore
from core.records_exporter import RecordsExporter
from core.storage import JsonFileStorage
from viewmodel.dtr_viewmodel import DTRViewModel

########################################################################
#                           Core fixtures                              #
########################################################################


@pytest.fixture
def clock() -> FakeClock:
    """
    Get a fake clock set on the test date at 9:00.
    """
    return FakeClock(TEST_START)


@pytest.fixture
def storage() -> FailingStorage:
    """
    Get an empty memory storage.
    """
    return FailingStorage()


@pytest.fixture
def file_storage(tmp_path: Path) -> JsonFileStorage:
    """
    Get a file storage under a temporary folder.
    """
    return JsonFileStorage(tmp_path / "data")


@pytest.fixture
def store(storage: FailingStorage) -> RecordStore:
    """
    Get a loaded record store, empty.
    """
    store = RecordStore(storage, key=TEST_RECORDS_KEY)
    store.load_all()
    return store


@pytest.fixture
def machine(clock: FakeClock) -> PunchStateMachine:
    """
    Get a punch state machine reading the fake clock.
    """
    return PunchStateMachine(clock=clock)


@pytest.fixture
def exporter(tmp_path: Path, clock: FakeClock) -> RecordsExporter:
    return RecordsExporter(tmp_path / "exports", title="Test Record", clock=clock)


@pytest.fixture
def viewmodel(
    machine: PunchStateMachine, store: RecordStore, exporter: RecordsExporter
) -> DTRViewModel:
    """
    Get a viewmodel binding the fixtures above.
    """
    return DTRViewModel(machine, store, exporter=exporter)

# tests/conftest.py
import logging
from typing import Dict, List, Tuple

import pytest
from prometheus_client import CollectorRegistry

from common.metrics import EngineMetrics
from memory_store import InMemoryTaskStore
from provisioning.context import HeadlessContext, RunContext
from provisioning.handlers.base import BatchTaskHandler, TaskHandler
from provisioning.models import EntityType, Outcome, Success
from settings.config_models import AppSettings, HookSettings, SoftwareSettings


@pytest.fixture
def app_settings(tmp_path):
    return AppSettings(
        hooks=HookSettings(hooks_dir=tmp_path / "hooks"),
        software=SoftwareSettings(tmp_dir=tmp_path / "scratch"),
    )


@pytest.fixture
def memory_store():
    return InMemoryTaskStore()


@pytest.fixture
def run_context(app_settings, memory_store):
    return RunContext(
        settings=app_settings,
        store=memory_store,
        logger=logging.getLogger("tests.provisioning"),
        metrics=EngineMetrics(CollectorRegistry()),
    )


@pytest.fixture
def headless():
    return HeadlessContext(logging.getLogger("tests.provisioning"))


class HandlerLog:
    """Shared record of handler activity across recording handler classes."""

    def __init__(self):
        self.calls: List[Tuple[EntityType, object, str]] = []
        self.outcomes: Dict[Tuple[EntityType, object], object] = {}
        self.setups: List[EntityType] = []
        self.batch_calls: List[EntityType] = []
        self.batch_result: Dict[EntityType, object] = {}

    def row_handler(self):
        log = self

        class RecordingHandler(TaskHandler):
            def setup(self):
                log.setups.append(self.entity_type)

            def handle(self, row, action) -> Outcome:
                log.calls.append((self.entity_type, row.id, action))
                result = log.outcomes.get((self.entity_type, row.id), Success())
                if isinstance(result, Exception):
                    raise result
                return result

        return RecordingHandler

    def batch_handler(self):
        log = self

        class RecordingBatchHandler(BatchTaskHandler):
            def setup(self):
                log.setups.append(self.entity_type)

            def process_all(self):
                log.batch_calls.append(self.entity_type)
                result = log.batch_result.get(self.entity_type, True)
                if isinstance(result, Exception):
                    raise result
                return result

        return RecordingBatchHandler

    def handler_map(self):
        batch = {EntityType.NETWORK_INTERFACE, EntityType.IP_ADDRESS}
        return {
            entity_type: (
                self.batch_handler() if entity_type in batch else self.row_handler()
            )
            for entity_type in EntityType
        }


@pytest.fixture
def handler_log():
    return HandlerLog()

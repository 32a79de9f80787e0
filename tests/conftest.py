" generic fixtures "
import dataclasses
import tempfile
import uuid
from pathlib import Path

import pytest
from pytest_asyncio import fixture

from staccato.config import Configuration
from staccato.models import Segment
from staccato.registry import SegmentRegistry
from staccato.runtime import RuntimePaths
from staccato.schema import STACCATO_CONFIG_SCHEMA
from staccato.sinks import StatusSink


def pytest_configure():
    "Runs once before all"
    from staccato.logging_setup import init_logger

    init_logger("/dev/null", force_debug=True)


class RecordingSink(StatusSink):
    "Keeps every published status line"

    def __init__(self, log):
        super().__init__(log)
        self.published: list[bytes] = []

    async def publish(self, status):
        self.published.append(status)


@pytest.fixture
def test_logger():
    from staccato.logging_setup import get_logger

    return get_logger("tests")


@pytest.fixture
def settings(test_logger):
    return Configuration({"delimiter": "|", "output_cap": 32}, logger=test_logger, schema=STACCATO_CONFIG_SCHEMA)


@pytest.fixture
def registry():
    return SegmentRegistry(
        [
            Segment("echo aa", 0, "first"),
            Segment("echo bb", 60, "second"),
            Segment("echo cc", 30, "second"),
        ],
        "|",
    )


@pytest.fixture
def runtime_paths():
    "Short runtime folder (unix socket paths are limited) and a private channel name"
    with tempfile.TemporaryDirectory(prefix="stc-") as folder:
        paths = RuntimePaths.for_user(folder=Path(folder))
        yield dataclasses.replace(paths, channel_name=f"staccato-test-{uuid.uuid4().hex[:12]}")


@pytest.fixture
def sink(test_logger):
    return RecordingSink(test_logger)


@fixture
async def app(registry, settings, sink, runtime_paths):
    "A daemon object which was not started"
    from staccato.daemon import Staccato

    return Staccato(registry, settings, sink, runtime_paths)

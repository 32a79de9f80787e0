import asyncio
import os
import resource

import pytest

from staccato.executor import CommandExecutor, environment_with, first_line, read_first_line
from staccato.models import Segment
from staccato.registry import SegmentRegistry


def make_executor(test_logger, *commands, cap=32):
    registry = SegmentRegistry([Segment(cmd) for cmd in commands], "|")
    return CommandExecutor(registry, cap, test_logger)


def test_first_line():
    assert first_line(b"hello\nworld\n", 32) == b"hello"
    assert first_line(b"hello", 3) == b"hel"
    assert first_line(b"", 3) == b""
    assert first_line(b"\nsecond", 10) == b""


def test_environment_with():
    assert environment_with([]) is None
    env = environment_with(["BUTTON=1", "EQ=a=b"])
    assert env["BUTTON"] == "1"
    assert env["EQ"] == "a=b"
    assert env["PATH"] == os.environ["PATH"]


@pytest.mark.asyncio
async def test_execute_first_line(test_logger):
    executor = make_executor(test_logger, "printf 'one\\ntwo\\n'")
    assert await executor.execute(0) == b"one"


@pytest.mark.asyncio
async def test_execute_strips_newline(test_logger):
    executor = make_executor(test_logger, "echo hello")
    assert await executor.execute(0) == b"hello"


@pytest.mark.asyncio
async def test_execute_truncates_to_cap(test_logger):
    executor = make_executor(test_logger, "printf '%050d\\n' 7", cap=32)
    output = await executor.execute(0)
    assert len(output) == 32
    assert output == b"0" * 32


@pytest.mark.asyncio
async def test_execute_empty_output(test_logger):
    executor = make_executor(test_logger, "true")
    assert await executor.execute(0) == b""


@pytest.mark.asyncio
async def test_execute_failing_command_keeps_output(test_logger):
    executor = make_executor(test_logger, "echo partial; exit 3")
    assert await executor.execute(0) == b"partial"


@pytest.mark.asyncio
async def test_extra_env_is_scoped_to_one_run(test_logger):
    executor = make_executor(test_logger, 'echo "button=${BUTTON:-none}"')
    assert await executor.execute(0, ["BUTTON=3"]) == b"button=3"
    assert await executor.execute(0) == b"button=none"
    assert "BUTTON" not in os.environ


@pytest.mark.asyncio
async def test_spawn_failure_returns_none(mocker):
    mocker.patch("asyncio.create_subprocess_shell", side_effect=OSError("fork failed"))
    log = mocker.Mock()
    executor = make_executor(log, "echo never")
    assert await executor.execute(0) is None
    log.error.assert_called_once()


@pytest.mark.asyncio
async def test_large_output_is_not_buffered(test_logger):
    executor = make_executor(test_logger, "head -c 200000000 /dev/zero | tr '\\0' a; echo never", cap=32)
    before = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    assert await executor.execute(0) == b"a" * 32
    after = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    assert after - before < 50 * 1024  # KiB


@pytest.mark.asyncio
async def test_read_first_line_stops_keeping_at_newline():
    stream = asyncio.StreamReader()
    stream.feed_data(b"first\n" + b"x" * 100_000)
    stream.feed_eof()
    assert await read_first_line(stream, 32) == b"first"
    assert stream.at_eof()

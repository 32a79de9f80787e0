import pytest

from staccato.models import ConfigError, Segment
from staccato.registry import SegmentRegistry, load_settings


def test_registry_basics(registry):
    assert len(registry) == 3
    assert registry[1].command == "echo bb"
    assert [s.tag for s in registry] == ["first", "second", "second"]
    assert registry.delimiter_bytes == b"|"
    assert registry.delimiter_width == 1


def test_valid_index(registry):
    assert registry.is_valid_index(0)
    assert registry.is_valid_index(2)
    assert not registry.is_valid_index(3)
    assert not registry.is_valid_index(-1)


def test_indices_for_tag(registry):
    assert registry.indices_for_tag("first") == [0]
    assert registry.indices_for_tag("second") == [1, 2]
    assert registry.indices_for_tag("third") == []


def test_multibyte_delimiter_width():
    registry = SegmentRegistry([Segment("echo")], " │ ")
    assert len(registry.delimiter_bytes) == 5
    assert registry.delimiter_width == 3


def test_empty_registry():
    with pytest.raises(ConfigError, match="Nothing to do"):
        SegmentRegistry([], "|")


def test_invalid_delimiter():
    with pytest.raises(ConfigError, match="UTF-8"):
        SegmentRegistry([Segment("echo")], "\udcff")


def test_from_config(test_logger):
    config = {
        "staccato": {"delimiter": " / "},
        "segments": [
            {"command": "date", "interval": 60},
            {"command": "echo vol", "tag": "volume"},
        ],
    }
    registry = SegmentRegistry.from_config(config, test_logger)
    assert registry.delimiter == " / "
    assert list(registry) == [Segment("date", 60, ""), Segment("echo vol", 0, "volume")]


def test_from_config_default_delimiter(test_logger):
    registry = SegmentRegistry.from_config({"segments": [{"command": "date"}]}, test_logger)
    assert registry.delimiter == " | "


@pytest.mark.parametrize(
    "segments",
    [
        [],
        [{"interval": 3}],
        [{"command": "date", "interval": -1}],
        [{"command": "date", "interval": "often"}],
        [{"command": "date", "interval": 1.5}],
        ["date"],
        {"command": "date"},
    ],
)
def test_from_config_errors(test_logger, segments):
    with pytest.raises(ConfigError):
        SegmentRegistry.from_config({"segments": segments}, test_logger)


def test_from_config_missing_command_is_logged(mocker):
    log = mocker.Mock()
    with pytest.raises(ConfigError):
        SegmentRegistry.from_config({"segments": [{"comand": "date"}]}, log)
    errors = " ".join(str(call.args[0]) for call in log.error.call_args_list)
    assert "Missing required field" in errors
    warnings = " ".join(str(call.args[0]) for call in log.warning.call_args_list)
    assert "did you mean 'command'" in warnings


def test_load_settings_defaults(test_logger):
    settings = load_settings({}, test_logger)
    assert settings.get_str("delimiter") == " | "
    assert settings.get_int("output_cap") == 32
    assert settings.get_str("sink") == "xroot"
    assert settings.get_float("tick") == 1.0


@pytest.mark.parametrize(
    "section",
    [
        {"sink": "dzen"},
        {"output_cap": 0},
        {"output_cap": 0.5},
        {"output_cap": 64.0},
        {"tick": -1},
        {"delimiter": ""},
        {"delimiter": 3},
    ],
)
def test_load_settings_errors(test_logger, section):
    with pytest.raises(ConfigError):
        load_settings({"staccato": section}, test_logger)

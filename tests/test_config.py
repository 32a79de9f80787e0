import pytest

from staccato.config import Configuration
from staccato.config_loader import ConfigLoader
from staccato.models import ConfigError
from staccato.schema import SEGMENT_SCHEMA
from staccato.validation import ConfigField, ConfigItems, ConfigValidator, format_config_error


def test_configuration_getters(test_logger):
    conf = Configuration({"interval": "12", "tick": "0.5", "bad": "x"}, logger=test_logger, schema=SEGMENT_SCHEMA)
    assert conf.get_int("interval") == 12
    assert conf.get_float("tick") == 0.5
    assert conf.get_int("bad", 4) == 4
    assert conf.get_str("tag") == ""
    assert conf.get("missing", "dflt") == "dflt"


def test_type_name():
    assert ConfigField("a", int).type_name == "int"
    assert ConfigField("a", (int, float)).type_name == "int or float"


def test_format_config_error():
    assert format_config_error("staccato", "sink", "Invalid value") == "[staccato] Config error for 'sink': Invalid value"
    assert format_config_error("s", "f", "m", "fix it").endswith("-> fix it")


def test_validator_rejects_bool_for_int(test_logger):
    schema = ConfigItems(ConfigField("count", int))
    errors = ConfigValidator({"count": True}, "sec", test_logger).validate(schema)
    assert errors == ["[sec] Config error for 'count': Expected int, got bool"]


def test_validator_choices(test_logger):
    schema = ConfigItems(ConfigField("mode", str, choices=["a", "b"]))
    errors = ConfigValidator({"mode": "c"}, "sec", test_logger).validate(schema)
    assert len(errors) == 1
    assert "Valid options: 'a', 'b'" in errors[0]


def test_unknown_keys(test_logger):
    schema = ConfigItems(ConfigField("interval", int))
    warnings = ConfigValidator({"intervall": 3, "zzz": 1}, "sec", test_logger).warn_unknown_keys(schema)
    assert "did you mean 'interval'" in warnings[0]
    assert "will be ignored" in warnings[1]


@pytest.mark.asyncio
async def test_load_file(tmp_path, test_logger):
    conf_file = tmp_path / "config.toml"
    conf_file.write_text('[staccato]\ndelimiter = " : "\n\n[[segments]]\ncommand = "date"\ninterval = 5\n')
    config = await ConfigLoader(test_logger).load(str(conf_file))
    assert config["staccato"]["delimiter"] == " : "
    assert config["segments"] == [{"command": "date", "interval": 5}]


@pytest.mark.asyncio
async def test_load_directory_merges_in_order(tmp_path, test_logger):
    (tmp_path / "20-more.toml").write_text('[[segments]]\ncommand = "uptime"\n')
    (tmp_path / "10-base.toml").write_text('[staccato]\nsink = "stdout"\n\n[[segments]]\ncommand = "date"\n')
    (tmp_path / "notes.txt").write_text("ignored")
    config = await ConfigLoader(test_logger).load(str(tmp_path))
    assert config["staccato"]["sink"] == "stdout"
    assert [s["command"] for s in config["segments"]] == ["date", "uptime"]


@pytest.mark.asyncio
async def test_load_missing_file(tmp_path, test_logger):
    with pytest.raises(ConfigError):
        await ConfigLoader(test_logger).load(str(tmp_path / "nope.toml"))


@pytest.mark.asyncio
async def test_load_syntax_error(tmp_path, test_logger):
    conf_file = tmp_path / "config.toml"
    conf_file.write_text("[staccato\n")
    with pytest.raises(ConfigError):
        await ConfigLoader(test_logger).load(str(conf_file))


def test_missing_required_field_mentions_description(test_logger):
    errors = ConfigValidator({}, "segments[0]", test_logger).validate(SEGMENT_SCHEMA)
    assert len(errors) == 1
    assert "Add command to [segments[0]] (Shell command producing the segment text)" in errors[0]


def test_number_types():
    tick = ConfigField("tick", float)
    assert tick.accepts(2)
    assert tick.accepts(0.5)
    assert not tick.accepts(False)
    assert not tick.accepts("1")
    interval = ConfigField("interval", int)
    assert interval.accepts(3)
    assert not interval.accepts(1.5)
    assert not interval.accepts(2.0)


def test_validator_rejects_float_for_int(test_logger):
    errors = ConfigValidator({"command": "date", "interval": 1.5}, "segments[0]", test_logger).validate(SEGMENT_SCHEMA)
    assert errors == ["[segments[0]] Config error for 'interval': Expected int, got float"]

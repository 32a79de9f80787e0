"""Declarative checks for the configuration sections.

A schema (`ConfigItems`) lists the `ConfigField`s a section may hold.
`ConfigValidator` reports every problem at once, so the user can fix the
whole file in one go, and points out misspelled keys.
"""

import difflib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

__all__ = [
    "ConfigField",
    "ConfigItems",
    "ConfigValidator",
    "format_config_error",
]


@dataclass
class ConfigField:
    """One expected key of a section.

    Attributes:
        name: key name
        field_type: expected type, or tuple of accepted types
        required: the key must be present
        default: value used when the key is absent
        description: shown when a required key is missing
        choices: accepted values, for enum-like keys
        validator: extra check returning a list of error messages
    """

    name: str
    field_type: type | tuple[type, ...] = str
    required: bool = False
    default: Any = None
    description: str = ""
    choices: list | None = None
    validator: Callable[[Any], list[str]] | None = None

    @property
    def type_name(self) -> str:
        """Human readable type, e.g. 'int or float'."""
        types = self.field_type if isinstance(self.field_type, tuple) else (self.field_type,)
        return " or ".join(typ.__name__ for typ in types)

    def accepts(self, value: Any) -> bool:  # noqa: ANN401
        """Tell if `value` has one of the expected types.

        A float field takes integers too, an int field rejects floats and bools are not numbers.
        """
        types = self.field_type if isinstance(self.field_type, tuple) else (self.field_type,)
        if isinstance(value, bool):
            return bool in types
        if isinstance(value, int):
            return int in types or float in types
        return isinstance(value, types)


class ConfigItems(list):
    """The fields of one section."""

    def __init__(self, *fields: ConfigField) -> None:
        super().__init__(fields)

    @property
    def names(self) -> list[str]:
        return [f.name for f in self]


def format_config_error(section: str, field: str, message: str, suggestion: str = "") -> str:
    """Build the message reported for a bad key.

    Args:
        section: section name (e.g. "staccato" or "segments[2]")
        field: key name
        message: what is wrong
        suggestion: how to fix it, if known
    """
    msg = f"[{section}] Config error for '{field}': {message}"
    if suggestion:
        msg += f" -> {suggestion}"
    return msg


class ConfigValidator:
    """Checks one section against a schema."""

    def __init__(self, config: dict, section: str, logger: logging.Logger) -> None:
        self.config = config
        self.section = section
        self.log = logger

    def _check_field(self, field: ConfigField) -> list[str]:
        value = self.config.get(field.name)
        if value is None:
            if not field.required:
                return []
            hint = f"Add {field.name} to [{self.section}]"
            if field.description:
                hint += f" ({field.description})"
            return [format_config_error(self.section, field.name, "Missing required field", hint)]

        if not field.accepts(value):
            return [format_config_error(self.section, field.name, f"Expected {field.type_name}, got {type(value).__name__}")]

        errors = []
        if field.choices is not None and value not in field.choices:
            choices = ", ".join(repr(c) for c in field.choices)
            errors.append(format_config_error(self.section, field.name, f"Invalid value {value!r}", f"Valid options: {choices}"))
        if field.validator:
            errors.extend(format_config_error(self.section, field.name, problem) for problem in field.validator(value))
        return errors

    def validate(self, schema: ConfigItems) -> list[str]:
        """Return the error messages for this section (empty if valid)."""
        errors = []
        for field in schema:
            errors.extend(self._check_field(field))
        return errors

    def warn_unknown_keys(self, schema: ConfigItems) -> list[str]:
        """Log a warning for every key the schema doesn't know, with a "did you mean" hint.

        Returns:
            The warnings
        """
        warnings = []
        for key in self.config:
            if key in schema.names:
                continue
            similar = difflib.get_close_matches(key, schema.names, n=1)
            if similar:
                msg = f"[{self.section}] Unknown option '{key}' (did you mean '{similar[0]}'?)"
            else:
                msg = f"[{self.section}] Unknown option '{key}' - will be ignored"
            self.log.warning(msg)
            warnings.append(msg)
        return warnings

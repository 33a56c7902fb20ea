#!/usr/bin/env python3
"""
File: config_parser.py
Description:
    Read and parse a configuration file in the .ini format. The file
    data is validated against a provided JSON schema. A default .ini
    file can be automatically created from the schema if non-existent.

    The JSON schema declares one block by section and one inner-block
    by key. The inner-block describes the expected value:
    - type: the value type as int, float, str or bool (required)
    - required: the value cannot be left empty (the key itself is
        always required)
    - default: the value written in the generated default file
    - comment: a help comment written before the key in the generated
        default file
    - min/max: range constraint for int and float values
    - enum: list of accepted values for str values

DTR Tracker - A personal daily time record application
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import logging
import json
import configparser
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, TextIO
from types import MappingProxyType

logger = logging.getLogger(__name__)


########################################################################
#                 Configuration parser custom error                    #
########################################################################


class ConfigError(Exception):
    """
    General configuration file error. It's the only error raised by this
    module.
    """

    def __init__(self, msg: str):
        super().__init__(msg)


########################################################################
#                         Internal helpers                             #
########################################################################


def _str_to_bool(s: str) -> bool:
    """
    Convert the given string to a bool, if possible.

    Raises:
        ValueError: string doesn't contain a valid boolean.
    """
    s = s.strip().lower()
    if s in {"true", "1", "yes", "on"}:
        return True
    elif s in {"false", "0", "no", "off"}:
        return False

    raise ValueError(f"Invalid boolean string: {s}")


class _SchemaEntry:
    """
    Rules of a single key-value pair, parsed from its JSON inner-block.
    """

    _CONV_MAP: dict[str, Callable[[str], Any]] = {
        "int": int,
        "float": float,
        "str": str,
        "bool": _str_to_bool,
    }

    _FIELDS = {"type", "required", "default", "comment", "min", "max", "enum"}

    def __init__(self, key: str, entry: dict[str, Any]):
        """
        Parse the schema entry.

        Raises:
            ConfigError: The entry is not a valid schema declaration.
        """
        self._key = key

        extra = set(entry.keys()) - self._FIELDS
        if extra:
            raise ConfigError(
                f"Unrecognized field(s): '{', '.join(sorted(extra))}' for key '{key}'."
            )

        vartype = entry.get("type")
        if vartype is None:
            raise ConfigError(f"'type' field missing for key '{key}'.")
        if vartype not in self._CONV_MAP:
            raise ConfigError(f"Type '{vartype}' unrecognized for key '{key}'.")

        self._vartype: str = vartype
        self._conv_func = self._CONV_MAP[vartype]

        self._required: bool = self.__field(entry, "required", (bool,), False)
        self._default: Any = self.__field(entry, "default", None, None)
        self._comment: Optional[str] = self.__field(entry, "comment", (str,), None)
        self._min = self.__field(entry, "min", (int, float), None)
        self._max = self.__field(entry, "max", (int, float), None)
        self._enum: Optional[list[str]] = self.__field(entry, "enum", (list,), None)

        if self._enum is not None:
            if self._vartype != "str":
                raise ConfigError(f"'enum' is only applicable to 'str' key '{key}'.")
            if not all(isinstance(choice, str) for choice in self._enum):
                raise ConfigError(f"'enum' of key '{key}' must only hold strings.")

    def __field(
        self, entry: dict[str, Any], field: str, vartypes: Optional[tuple], default: Any
    ) -> Any:
        """
        Get an optional field from the JSON block and check its type.
        """
        if field not in entry:
            return default

        value = entry[field]
        # bool is an int subclass, never accept it for numeric fields
        if vartypes and (
            not isinstance(value, vartypes)
            or (isinstance(value, bool) and bool not in vartypes)
        ):
            raise ConfigError(
                f"Type error for field '{field}' in key '{self._key}': "
                f"'{value}' is a '{type(value).__name__}'."
            )
        return value

    @property
    def default(self) -> Any:
        return self._default

    @property
    def comment(self) -> Optional[str]:
        return self._comment

    def convert(self, value: str) -> Any:
        """
        Check the schema rules for the given value and convert it to its
        declared type.

        Returns:
            Any: The converted value or `None` for an allowed empty value.

        Raises:
            ValueError: The value breaks a rule, the message tells which.
        """
        if not value:
            if self._required:
                raise ValueError("value is required")
            return None

        try:
            converted = self._conv_func(value)
        except ValueError:
            raise ValueError(f"type error for '{value}', '{self._vartype}' required")

        if self._min is not None and converted < self._min:
            raise ValueError(f"{converted} is lower than {self._min}")
        if self._max is not None and converted > self._max:
            raise ValueError(f"{converted} is greater than {self._max}")
        if self._enum is not None and converted not in self._enum:
            raise ValueError(f"'{converted}' is not one of {', '.join(self._enum)}")

        return converted

    def default_literal(self) -> str:
        """
        Get the default value as written in a .ini file.
        """
        if self._default is None:
            return ""
        if isinstance(self._default, bool):
            return "true" if self._default else "false"
        return str(self._default)


########################################################################
#                  Configuration parser and validator                  #
########################################################################


class ConfigParser:
    """
    The `ConfigParser` class loads and validates a configuration file
    in the `.ini` format against a schema file in the `.json` format.
    It provides a read-only view on the loaded data.
    """

    def __init__(
        self,
        schema: str | TextIO,
        config: str | TextIO,
        name: Optional[str] = None,
        gen_default: bool = True,
    ):
        """
        Load the schema, then load and validate the configuration.

        Args:
            schema (str | TextIO): Path to the schema file (.json) or an
                already opened file-like object.
            config (str | TextIO): Path to the configuration file (.ini)
                or an already opened file-like object.
            name (Optional[str]): A name to identify the configuration in
                error messages. Required for file-like objects.
            gen_default (bool): Generate a default configuration file
                from the schema when `config` is a path to a missing file.

        Raises:
            ConfigError: Any error related to data parsing, validation,
                etc.
        """
        self._schema: dict[str, dict[str, _SchemaEntry]] = {}
        self._data: dict[str, dict[str, Any]] = {}

        if name:
            self._name = name
        elif isinstance(config, str):
            self._name = Path(config).name
        else:
            raise ConfigError("A configuration name is required.")

        self.__load_schema(schema)

        if gen_default and isinstance(config, str) and not Path(config).exists():
            try:
                with open(config, "x", encoding="utf-8") as file:
                    self.generate_default(file)
            except OSError as e:
                raise ConfigError(
                    f"Error generating the default configuration file for '{self._name}'."
                ) from e

            logger.info(f"Initial configuration file setup under '{config}'.")

        self.__validate(self.__load_config(config))

    def __load_schema(self, source: str | TextIO):
        """
        Load the schema file (.json) into `self._schema`.
        """
        try:
            if isinstance(source, str):
                with open(source, "r", encoding="utf-8") as file:
                    schema = json.load(file)
            else:
                schema = json.load(source)

        except FileNotFoundError:
            raise ConfigError(f"Schema file not found for '{self._name}'.")
        except OSError as e:
            raise ConfigError(f"OS error occurred opening '{self._name}' schema.") from e
        except json.JSONDecodeError as e:
            raise ConfigError(f"Schema parsing error occurred for '{self._name}'.") from e

        for section, keys in schema.items():
            self._schema[section] = {
                key: _SchemaEntry(key, entry) for key, entry in keys.items()
            }

    def __load_config(self, source: str | TextIO) -> configparser.ConfigParser:
        """
        Load the configuration file (.ini).
        """
        config = configparser.ConfigParser(interpolation=None)
        try:
            if isinstance(source, str):
                with open(source, encoding="utf-8") as file:
                    config.read_file(file)
            else:
                config.read_file(source)

        except configparser.Error as e:
            raise ConfigError(f"A parsing error occurred reading '{self._name}'.") from e
        except OSError as e:
            raise ConfigError(f"An error occurred reading '{self._name}'.") from e

        return config

    def __validate(self, config: configparser.ConfigParser):
        """
        Validate the loaded configuration and populate `self._data` with
        the values converted to their declared type.
        """
        diff = self.__compare(self._schema.keys(), config.sections())
        if diff:
            raise ConfigError(
                f"'{self._name}' sections differ from model: {', '.join(diff)}."
            )

        for section, entries in self._schema.items():
            diff = self.__compare(entries.keys(), config[section].keys())
            if diff:
                raise ConfigError(
                    f"'{self._name}' section [{section}] differs from model: "
                    f"{', '.join(diff)}."
                )

            self._data[section] = {}
            for key, entry in entries.items():
                try:
                    self._data[section][key] = entry.convert(config[section][key])
                except ValueError as e:
                    raise ConfigError(
                        f"Value for key '{key}' in section '{section}' is invalid: {e}."
                    ) from e

    @staticmethod
    def __compare(model: Iterable[str], config: Iterable[str]) -> list[str]:
        """
        Get the missing (-) and extra (+) names of the configuration.
        """
        model, config = set(model), set(config)
        missing = [f"-{e}" for e in sorted(model - config)]
        extra = [f"+{e}" for e in sorted(config - model)]
        return missing + extra

    def generate_default(self, stream: TextIO):
        """
        Write a default configuration inferred from the schema, each key
        preceded by its comment when available.
        """
        for section, entries in self._schema.items():
            stream.write(f"[{section}]\n")
            for key, entry in entries.items():
                if entry.comment:
                    stream.write(f"; {entry.comment}\n")
                stream.write(f"{key} = {entry.default_literal()}\n")
            stream.write("\n")

    def get_view(self) -> MappingProxyType[str, MappingProxyType[str, Any]]:
        """
        Get a read-only view on the configuration data.
        """
        return MappingProxyType(
            {section: MappingProxyType(values) for section, values in self._data.items()}
        )

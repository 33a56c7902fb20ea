#!/usr/bin/env python3
"""
File: local_config.py
Description:
    Read, parse and validate the local configuration file
    `local_config.ini` against its schema under
    `assets/config/local_config_schema.json`.

    The `LocalConfig` object is created once by the bootstrap and handed
    to the modules that need it.

DTR Tracker - A personal daily time record application
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import logging
import calendar
from os.path import join
from types import MappingProxyType
from typing import Any, Optional

# Internal libraries
from common.config_parser import ConfigParser

logger = logging.getLogger(__name__)

SCHEMA_FILE_PATH = join("assets", "config", "local_config_schema.json")
CONFIG_FILE_PATH = join("local_config.ini")

# Weekday names accepted by the `week_start` setting
_WEEKDAYS = {
    "monday": calendar.MONDAY,
    "tuesday": calendar.TUESDAY,
    "wednesday": calendar.WEDNESDAY,
    "thursday": calendar.THURSDAY,
    "friday": calendar.FRIDAY,
    "saturday": calendar.SATURDAY,
    "sunday": calendar.SUNDAY,
}


class LocalConfig:
    """
    Application's configuration data, validated against its schema.
    """

    def __init__(self, path: Optional[str] = None, schema: str = SCHEMA_FILE_PATH):
        """
        Load the configuration. A default file is generated from the
        schema if none exists at the given path.

        Raises:
            ConfigError: The configuration is invalid.
        """
        self._config_path = path or CONFIG_FILE_PATH
        self._config = ConfigParser(schema, self._config_path, gen_default=True)
        self._view = self._config.get_view()

    @property
    def path(self) -> str:
        return self._config_path

    def section(self, section: str) -> MappingProxyType[str, Any]:
        """
        Returns:
            MappingProxyType: A read-only view on a data section.
        """
        return self._view[section]

    @property
    def first_weekday(self) -> int:
        """
        Get the configured first day of the week as a `calendar` weekday
        constant.
        """
        return _WEEKDAYS[self.section("records")["week_start"]]

    def show_config(self):
        """
        Log the local configuration in use, section by section.
        """
        logger.info(f"Using local configuration '{self._config_path}'.")
        for section, values in self._view.items():
            logger.info(f"Section [{section}] = {dict(values)}")

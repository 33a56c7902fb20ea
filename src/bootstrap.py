#!/usr/bin/env python3
"""
File: bootstrap.py
Description:
    DTR Tracker program bootstrap.

DTR Tracker - A personal daily time record application
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import logging, logging.handlers
import argparse
import locale
from typing import Any, Optional, Sequence

# Internal libraries
from local_config import LocalConfig, CONFIG_FILE_PATH
from common.config_parser import ConfigError
from common.translations import LanguageService
from core.time_record import CorruptPersistedDataError, StorageError

logger = logging.getLogger(__name__)

# Logging configuration
LOGGING_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


class ColorFormatter(logging.Formatter):
    """
    Custom log formatter that colors only the log level name.
    """

    COLORS = {
        "DEBUG": "\033[94m",  # Blue
        "INFO": "\033[92m",  # Green
        "WARNING": "\033[93m",  # Yellow
        "ERROR": "\033[91m",  # Red
        "CRITICAL": "\033[41m",  # White on Red
        "RESET": "\033[0m",  # Reset color
    }

    def __init__(self):
        super().__init__(LOGGING_FORMAT)

    def format(self, record: logging.LogRecord):
        # Color a copy, the record is shared with the file handler
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        record.levelname = f"{color}{record.levelname}{self.COLORS['RESET']}"
        return super().format(record)


def configure_logging(level: str = "DEBUG", filename: Optional[str] = None):
    """
    Configure the logging module.

    Logs are printed in the standard output stream and, if a file name
    is given, saved in log files with a time rotating strategy: a new
    file is created at midnight and files are kept up to 7 days.
    """
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(ColorFormatter())

    handlers: list[logging.Handler] = [console_handler]
    if filename:
        handlers.append(
            logging.handlers.TimedRotatingFileHandler(
                filename=filename,
                when="midnight",
                interval=1,
                backupCount=7,
                encoding="utf-8",
            )
        )

    # Configure logging once for all modules
    logging.basicConfig(
        level=level,
        format=LOGGING_FORMAT,
        handlers=handlers,
        force=True,
    )


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse the program arguments.
    """
    parser = argparse.ArgumentParser(description="DTR Tracker - Daily Time Record")
    parser.add_argument(
        "--config",
        type=str,
        default=CONFIG_FILE_PATH,
        help=(
            "Path to local configuration file (.ini). "
            "A default file is created if not existing."
        ),
    )
    return parser.parse_args(argv)


def _set_locale(value: str):
    """
    Try to set the desired time locale, used for month names.
    """
    try:
        locale.setlocale(locale.LC_TIME, value)
    except locale.Error as ex:
        logger.warning(f"Unable to set the desired locale '{value}': {ex}")

    actual = locale.getlocale(locale.LC_TIME)
    logger.info(f"Using time locale {actual}.")


def load_backend(config: LocalConfig, translator: Any) -> Any:
    """
    Load the application backend services: the record store with its
    storage, the punch state machine, the exporter and the viewmodel
    binding them. The stored records are loaded.

    Returns:
        DTRViewModel: Loaded backend handle.
    """
    from core.storage import JsonFileStorage
    from core.record_store import RecordCodec, RecordStore
    from core.punch_machine import PunchStateMachine
    from core.records_exporter import RecordsExporter
    from viewmodel.dtr_viewmodel import DTRViewModel

    storage_conf = config.section("storage")
    records_conf = config.section("records")
    export_conf = config.section("export")

    try:
        codec = RecordCodec(records_conf["date_format"], records_conf["time_format"])
    except ValueError as e:
        raise ConfigError(f"Invalid section [records] of '{config.path}': {e}") from e
    store = RecordStore(
        JsonFileStorage(storage_conf["directory"]), codec, storage_conf["records_key"]
    )
    exporter = RecordsExporter(
        export_conf["directory"],
        title=translator(export_conf["title"] or "Daily Time Record"),
        codec=codec,
    )

    viewmodel = DTRViewModel(
        PunchStateMachine(),
        store,
        first_weekday=config.first_weekday,
        exporter=exporter,
        translate=translator,
    )

    try:
        viewmodel.load()
    except (CorruptPersistedDataError, StorageError):
        # The viewmodel notifies the user, the store refuses to write
        # until the records can be loaded
        logger.exception("Starting without the stored records.")

    return viewmodel


def _load_kivy_frontend(config: LocalConfig, backend: Any, translator: Any) -> Any:
    """
    Load the Kivy frontend.

    Returns:
        Any: Application handle.
    """
    ui_conf = config.section("ui")

    # Import the view module to configure Kivy
    from kivy_view.dtr_view import DTRApp, theme_for

    app = DTRApp(
        backend,
        translate=translator,
        fullscreen=ui_conf["fullscreen"],
        theme=theme_for(ui_conf["dark_mode"]),
        title=config.section("export")["title"] or "Daily Time Record",
    )

    logger.info(f"'{app}' configured with Kivy frontend.")
    return app


def app_bootstrap(argv: Optional[Sequence[str]] = None) -> Any:
    """
    Standard application bootstrap. Load the program configuration, the
    logging module, the backend services and finally the configured
    frontend.

    Returns:
        Any: An application handle that supports calling a blocking
            run() and a stop() on it.
    """
    args = parse_args(argv)

    # Log to the console until the configuration tells more
    configure_logging()
    config = LocalConfig(args.config)

    log_conf = config.section("logging")
    configure_logging(log_conf["level"], log_conf["file"])
    logger.info("... DTR Tracker Application Startup ...")
    config.show_config()

    general_conf = config.section("general")
    if general_conf["locale"]:
        _set_locale(general_conf["locale"])

    translator = LanguageService(general_conf["language"])
    backend = load_backend(config, translator)

    if general_conf["frontend"] == "kivy":
        return _load_kivy_frontend(config, backend, translator)

    raise NotImplementedError(
        f"The frontend '{general_conf['frontend']}' is not supported."
    )

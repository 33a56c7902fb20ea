#!/usr/bin/env python3
"""
File: translations.py
Description:
    Internationalization (i18n) service.

    Translation catalogs are written as gettext .po files located under
    `assets/locales/<language>/<domain>.po`. They are compiled to .mo
    files with polib whenever the .mo file is missing or outdated.

DTR Tracker - A personal daily time record application
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import logging
from os.path import join
from pathlib import Path
from typing import Any
from gettext import GNUTranslations, NullTranslations

# Third-party libraries
import polib

logger = logging.getLogger(__name__)

LOCALES_DIRECTORY = join("assets", "locales")
DEFAULT_LANGUAGE = "en"


class LanguageService:
    """
    Compiles and loads all available translation catalogs and provides
    the translations of the selected language.
    """

    def __init__(
        self,
        language: str = DEFAULT_LANGUAGE,
        directory: str | Path = LOCALES_DIRECTORY,
    ):
        """
        Setup the language service. Compile and load all available
        language files, then select the given language. Message IDs are
        returned untranslated if no catalog exists for it.
        """
        self._directory = Path(directory)
        self._translators: dict[str, GNUTranslations] = {}
        self._compile_po_files()
        self._load_languages()

        self._language = language
        self._translator: NullTranslations
        if language in self._translators:
            self._translator = self._translators[language]
        else:
            logger.warning(
                f"No translation found for language '{language}', "
                "message IDs are used instead."
            )
            self._translator = NullTranslations()

    @property
    def language(self) -> str:
        return self._language

    @property
    def languages(self) -> list[str]:
        return sorted(self._translators)

    def _compile_po_files(self):
        """
        Compile all .po files into .mo files.
        """
        for po_file in self._directory.rglob("*.po"):
            mo_file = po_file.with_suffix(".mo")
            if mo_file.exists() and mo_file.stat().st_mtime >= po_file.stat().st_mtime:
                logger.debug(f"Skipped already compiled '{mo_file}'.")
                continue

            po = polib.pofile(str(po_file))
            po.save_as_mofile(str(mo_file))
            logger.debug(f"Compiled '{mo_file}' from '{po_file}'.")

    def _load_languages(self):
        """
        Load translators for all available languages.
        """
        for mo_file in self._directory.rglob("*.mo"):
            if mo_file.parent.parent.resolve() != self._directory.resolve():
                raise RuntimeError(
                    f"Invalid translation file location: '{mo_file}'. Expected "
                    f"under '{self._directory / '<language>'}'."
                )

            lang = mo_file.parent.name
            with open(mo_file, "rb") as fb:
                self._translators[lang] = GNUTranslations(fb)
            logger.info(f"Created translator for language '{lang}'.")

    def translate(self, msgid: str, **kwargs: Any) -> str:
        """
        Get the translation of a message ID, with its `{placeholders}`
        replaced by the given keyword arguments.
        """
        text = self._translator.gettext(msgid)
        return text.format(**kwargs) if kwargs else text

    def __call__(self, msgid: str, **kwargs: Any) -> str:
        return self.translate(msgid, **kwargs)


def untranslated(msgid: str, **kwargs: Any) -> str:
    """
    Translation function used when no language service is configured.
    """
    return msgid.format(**kwargs) if kwargs else msgid

#!/usr/bin/env python3
"""
File: translations_test.py
Description:
    Unit test the language service.

DTR Tracker - A personal daily time record application
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import pytest
import logging
import textwrap
from pathlib import Path

# Internal libraries
from common.translations import LanguageService, untranslated

logger = logging.getLogger(__name__)

LOCALES = Path(__file__).parents[1] / "assets" / "locales"

TEST_PO = textwrap.dedent(
    """\
    msgid ""
    msgstr ""
    "Content-Type: text/plain; charset=UTF-8\\n"

    msgid "Time In"
    msgstr "Entrée"

    msgid "Week {week}"
    msgstr "Semaine {week}"
    """
)


@pytest.fixture
def locales(tmp_path: Path) -> Path:
    """
    Get a locales folder with a single french catalog.
    """
    folder = tmp_path / "locales"
    (folder / "fr").mkdir(parents=True)
    (folder / "fr" / "messages.po").write_text(TEST_PO, encoding="utf-8")
    return folder


def test_translate(locales: Path):
    service = LanguageService("fr", locales)

    assert (locales / "fr" / "messages.mo").exists()
    assert service.language == "fr"
    assert service.languages == ["fr"]
    assert service.translate("Time In") == "Entrée"
    assert service("Week {week}", week=2) == "Semaine 2"
    # Unknown IDs are returned as is
    assert service("Time Out") == "Time Out"


def test_unknown_language_falls_back(locales: Path):
    service = LanguageService("de", locales)
    assert service("Week {week}", week=2) == "Week 2"


def test_misplaced_catalog_raises(locales: Path):
    nested = locales / "fr" / "LC_MESSAGES"
    nested.mkdir()
    (nested / "messages.po").write_text(TEST_PO, encoding="utf-8")
    with pytest.raises(RuntimeError):
        LanguageService("fr", locales)


def test_application_catalogs():
    """
    The shipped catalogs compile and hold the same messages.
    """
    service = LanguageService("fr", LOCALES)
    assert {"en", "fr"} <= set(service.languages)
    assert service("Time In") != "Time In"
    assert LanguageService("en", LOCALES)("Time In") == "Time In"


def test_untranslated():
    assert untranslated("Week {week}", week=5) == "Week 5"
    assert untranslated("{action} is not allowed now.") == "{action} is not allowed now."

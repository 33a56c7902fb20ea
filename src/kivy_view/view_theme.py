#!/usr/bin/env python3
"""
File: view_theme.py
Description:
    Define base properties for a view theme.

DTR Tracker - A personal daily time record application
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

from dataclasses import dataclass

from kivy.utils import get_color_from_hex

# RGBA color as used by Kivy
Color = tuple[float, float, float, float] | list[float]


@dataclass
class ViewTheme:
    """
    Define the view theme properties.
    """

    # Background color (main screen)
    bg_color: Color

    # Surface color (table, panels)
    surface_color: Color

    # Primary color (buttons, highlights)
    primary_color: Color

    # Text color for titles
    text_primary_color: Color

    # Text color for table rows and helper texts
    text_secondary_color: Color

    # Error color (rejected actions, anomalies)
    error_color: Color

    # Disabled color (disabled buttons)
    disabled_color: Color


# Light theme
LIGHT_THEME = ViewTheme(
    bg_color=get_color_from_hex("FFFFFF"),
    surface_color=get_color_from_hex("F5F5F7"),
    primary_color=get_color_from_hex("1C6EAC"),
    text_primary_color=get_color_from_hex("1C6EAC"),
    text_secondary_color=get_color_from_hex("000000"),
    error_color=get_color_from_hex("ED1C24"),
    disabled_color=(0.55, 0.55, 0.55, 1),
)

# Dark theme
DARK_THEME = ViewTheme(
    bg_color=get_color_from_hex("1F1F1F"),
    surface_color=get_color_from_hex("3F3F3F"),
    primary_color=get_color_from_hex("238BD9"),
    text_primary_color=get_color_from_hex("238BD9"),
    text_secondary_color=get_color_from_hex("B0BEC5"),
    error_color=(0.9, 0.3, 0.3, 1),
    disabled_color=(0.4, 0.4, 0.4, 1),
)

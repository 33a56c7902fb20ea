#!/usr/bin/env python3
"""
File: dtr_view.py
Description:
    This Kivy-based view displays the punch buttons, the month and week
    selectors and the records table. It observes the ViewModel live data
    to update itself and forwards the user interactions to the
    ViewModel. The layout is described in `assets/dtr.kv`.

DTR Tracker - A personal daily time record application
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# pyright: reportGeneralTypeIssues=false
# pyright: reportUnknownMemberType=false
# pyright: reportUnknownVariableType=false

# Only the application class is publicly available
__all__ = ["DTRApp"]

# Configure kivy settings before importing it
import os

os.environ["KIVY_LOG_MODE"] = "MIXED"
os.environ["KIVY_NO_ARGS"] = "1"

# Import Kivy libraries
from kivy.app import App
from kivy.core.window import Window
from kivy.uix.boxlayout import BoxLayout
from kivy.uix.label import Label
from kivy.properties import ObjectProperty, StringProperty
from kivy.clock import Clock

# Import logging and get the module logger
import logging

logger = logging.getLogger(__name__)

# Internal imports
from common.translations import untranslated
from core.time_record import PunchAction, Status, TimeRecord
from viewmodel.dtr_viewmodel import DTRViewModel, Translate
from .view_theme import DARK_THEME, LIGHT_THEME, ViewTheme

# Other imports
import time
from typing import Any, Optional

# Text shown in the table for a missing break
NO_BREAK = "-"

# Buttons identifiers in the kv file
_PUNCH_BUTTONS = {
    PunchAction.TIME_IN: "time_in_button",
    PunchAction.BREAK_OUT: "break_out_button",
    PunchAction.BREAK_IN: "break_in_button",
    PunchAction.TIME_OUT: "time_out_button",
}


class DTRApp(App):
    """
    DTR application class. The application starts the graphic library
    and creates the main screen.
    """

    # The kv file is located in the assets/ folder
    kv_directory = "assets"

    # Set the rebind flag to trigger the observers when the theme changes
    theme = ObjectProperty(LIGHT_THEME, rebind=True)

    def __init__(
        self,
        viewmodel: DTRViewModel,
        translate: Translate = untranslated,
        fullscreen: bool = False,
        theme: Optional[ViewTheme] = None,
        title: str = "Daily Time Record",
    ):
        """
        Initialize the application.

        Args:
            viewmodel (DTRViewModel): The viewmodel instance.
            translate (Translate): Translation function of the labels.
            fullscreen (bool): Enable fullscreen mode.
            theme (ViewTheme): Optional theme to customize UI colors.
            title (str): Window and screen title.
        """
        super().__init__()

        self._viewmodel = viewmodel
        self.tr = translate
        self.title = translate(title)

        Window.fullscreen = "auto" if fullscreen else False
        if not fullscreen:
            Window.size = (1000, 720)

        if theme:
            self.theme = theme

    def build(self):
        """
        Called by kivy to build the window root widget.
        """
        return MainScreen(self._viewmodel, self)

    def on_stop(self):
        """
        Called by kivy when the application finishes running.
        """
        self._viewmodel.close()
        logger.info("Application closed, goodbye.")

    def __repr__(self) -> str:
        return self.__class__.__name__


class MainScreen(BoxLayout):
    """
    Application main screen.
    """

    ## Properties used by the kv file
    clock_time = StringProperty("")
    clock_date = StringProperty("")
    title_text = StringProperty("")
    status_text = StringProperty("")
    message_text = StringProperty("")

    def __init__(self, viewmodel: DTRViewModel, app: DTRApp):
        """
        Initialize application main screen.

        Args:
            viewmodel (DTRViewModel): The viewmodel in use.
            app (DTRApp): The running application.
        """
        super().__init__()

        self._viewmodel = viewmodel
        self._app = app
        self._tr = app.tr

        # Spinner texts to selection values
        self._month_values: dict[str, Optional[int]] = {}
        self._week_values: dict[str, Optional[int]] = {}
        # Set while the spinners are updated from the viewmodel
        self._updating = False

        self.title_text = app.title
        for action, button_id in _PUNCH_BUTTONS.items():
            self.ids[button_id].text = viewmodel.action_label(action)
        self.ids.export_button.text = self._tr("Export Records")

        # Schedule the clock time update
        self._update_clock_time(0)
        Clock.schedule_interval(self._update_clock_time, 1.0)

        # Observe the viewmodel
        viewmodel.status.observe(self._on_status, init_call=True)
        viewmodel.enabled_actions.observe(self._on_enabled_actions, init_call=True)
        viewmodel.months.observe(self._on_months, init_call=True)
        viewmodel.weeks.observe(self._on_weeks, init_call=True)
        viewmodel.selection.observe(self._on_selection)
        viewmodel.filtered_records.observe(self._on_records, init_call=True)
        viewmodel.message.observe(self._on_message, init_call=True)

    def _update_clock_time(self, _):
        """
        Update the clock time and date.
        """
        self.clock_time = time.strftime("%H:%M:%S")
        self.clock_date = time.strftime("%d %B %Y")

    ### Viewmodel observers ###

    def _on_status(self, status: Status):
        self.status_text = self._tr(
            "Status: {status}", status=self._viewmodel.status_label(status)
        )

    def _on_enabled_actions(self, actions: frozenset[PunchAction]):
        for action, button_id in _PUNCH_BUTTONS.items():
            self.ids[button_id].disabled = action not in actions

    def _on_months(self, months: tuple[int, ...]):
        self._month_values = {self._viewmodel.month_label(None): None}
        for month in months:
            self._month_values[self._viewmodel.month_label(month)] = month
        self.__set_spinner(
            self.ids.month_spinner,
            self._month_values,
            self._viewmodel.selection.value.month,
        )

    def _on_weeks(self, weeks: tuple[int, ...]):
        self._week_values = {self._viewmodel.week_label(None): None}
        for week in weeks:
            self._week_values[self._viewmodel.week_label(week)] = week
        self.__set_spinner(
            self.ids.week_spinner,
            self._week_values,
            self._viewmodel.selection.value.week,
        )
        # No week selection without a month
        visible = self._viewmodel.selection.value.month is not None
        self.ids.week_spinner.opacity = 1.0 if visible else 0.0
        self.ids.week_spinner.disabled = not visible

    def _on_selection(self, _):
        # The week labels stay equal when moving between months with the
        # same weeks, refresh the shown selection anyway
        self._on_weeks(self._viewmodel.weeks.value)

    def _on_records(self, records: tuple[TimeRecord, ...]):
        """
        Rebuild the records table.
        """
        grid = self.ids.records_grid
        grid.clear_widgets()
        codec = self._viewmodel.codec
        for record in records:
            cells = (
                codec.format_date(record.date),
                codec.format_time(record.time_in),
                codec.format_time(record.break_out) or NO_BREAK,
                codec.format_time(record.break_in) or NO_BREAK,
                codec.format_time(record.time_out),
                record.total_hours + (" !" if record.clock_anomaly else ""),
            )
            for text in cells:
                grid.add_widget(RecordCell(text=text))

    def _on_message(self, message: str):
        self.message_text = message

    def __set_spinner(self, spinner: Any, values: dict[str, Optional[int]], current: Optional[int]):
        """
        Replace the spinner values and show the current selection.
        """
        self._updating = True
        try:
            spinner.values = list(values.keys())
            spinner.text = next(
                (label for label, value in values.items() if value == current),
                spinner.values[0],
            )
        finally:
            self._updating = False

    ### User interactions ###

    def on_punch(self, action_name: str):
        """
        Called when a punch button is released.
        """
        self._viewmodel.punch(PunchAction[action_name])

    def on_month_selected(self, label: str):
        if self._updating or label not in self._month_values:
            return
        self._viewmodel.select_month(self._month_values[label])

    def on_week_selected(self, label: str):
        if self._updating or label not in self._week_values:
            return
        self._viewmodel.select_week(self._week_values[label])

    def on_export_press(self):
        self._viewmodel.export()


class RecordCell(Label):
    """
    A cell of the records table, styled by the kv file.
    """

    pass


def theme_for(dark_mode: bool) -> ViewTheme:
    """
    Get the theme matching the dark mode setting.
    """
    return DARK_THEME if dark_mode else LIGHT_THEME

#!/usr/bin/env python3
"""
A live data is a holder of a generic type variable that can be
observed as defined by the observer pattern. The viewmodel exposes its
state to the view through live data objects.

---
DTR Tracker - A personal daily time record application

Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

from typing import Generic, TypeVar, Callable

T = TypeVar(name="T")  # Generic type declaration


class LiveData(Generic[T]):
    """
    Defines an observable data of type T.

    Observers are called in registration order. In bus mode, observers
    are notified each time a value is set, even if it is equal to the
    previous one. Otherwise they are notified on change only.
    """

    def __init__(self, value: T, bus_mode: bool = False):
        """
        Create a live data of type T with an initial value.

        Args:
            value (T): Initial value.
            bus_mode (bool): Enable/disable bus mode.
        """
        self._value = value
        self._bus_mode = bus_mode
        self._observers: list[Callable[[T], None]] = []

    def observe(self, observer: Callable[[T], None], init_call: bool = False):
        """
        Add an observer to the live data. Adding the same observer twice
        has no effect.

        Args:
            observer (Callable[[T], None]): New observer to register.
            init_call (bool): `True` to setup the observer with the
                current value.
        """
        if observer not in self._observers:
            self._observers.append(observer)
        if init_call:
            observer(self._value)

    def remove(self, observer: Callable[[T], None]):
        """
        Remove an observer, if registered.
        """
        if observer in self._observers:
            self._observers.remove(observer)

    @property
    def value(self) -> T:
        return self._value

    @value.setter
    def value(self, value: T):
        """
        Change the value and notify the observers.
        """
        if not self._bus_mode and self._value == value:
            return

        self._value = value
        # Iterate a copy, an observer may remove itself
        for observer in list(self._observers):
            observer(self._value)

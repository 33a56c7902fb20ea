#!/usr/bin/env python3
"""
Define the base interfaces to build an event-driven finite state
machine.

---
DTR Tracker - A personal daily time record application

Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

from abc import ABC
from typing import Any, Optional


class IStateBehavior(ABC):
    """
    Base interface that defines how a state behaves.

    A state declares which events it accepts and how it reacts to them.
    States don't hold a reference on the machine, which allows them to be
    plain immutable values.
    """

    def entry(self):
        """
        State entry method.
        """
        pass

    def accepts(self, event: Any) -> bool:
        """
        Tell if the state knows how to handle the event. The machine
        never calls `handle()` with a rejected event.
        """
        return False

    def handle(self, event: Any) -> Optional["IStateBehavior"]:
        """
        State event handling method.

        Returns:
            Optional[IStateBehavior]: A new state object if a transition
                should be performed.
        """
        pass

    def exit(self):
        """
        State exit method.
        """
        pass

    def __str__(self):
        """
        Provide a default state description.
        """
        return self.__class__.__name__


class IStateMachine(ABC):
    """
    Base class that runs a finite state machine driven by discrete
    events.

    The initial state is entered at construction. Each dispatched event
    is either handled by the current state, possibly producing a
    transition, or rejected without any side effect.
    """

    def __init__(self, init_state: IStateBehavior):
        """
        Create the state machine and enter the given state.

        Args:
            init_state (IStateBehavior): Initial state.
        """
        self._state: IStateBehavior = init_state
        self._state.entry()

    @property
    def state(self) -> IStateBehavior:
        return self._state

    def __make_transition(self, state: IStateBehavior):
        """
        Internal method to change state. Exit the previous state and
        enter the new one.
        """
        old_state = self._state
        self._state.exit()

        self._state = state
        self._state.entry()

        self.on_state_changed(old_state, self._state)

    def dispatch(self, event: Any) -> bool:
        """
        Submit an event to the current state.

        Returns:
            bool: `False` if the current state rejected the event, in which
                case nothing changed.
        """
        if not self._state.accepts(event):
            return False

        next_state = self._state.handle(event)
        if next_state:
            self.__make_transition(next_state)
        return True

    def on_state_changed(self, old_state: IStateBehavior, new_state: IStateBehavior):
        """
        This method can be overriden to be notified on state transition.

        Args:
            old_state (IStateBehavior): Old state.
            new_state (IStateBehavior): New state (= self._state).
        """
        pass

"""Qt adapters for driving a typing session."""

from .key_input import KeyInputController, QtClock

__all__ = ['KeyInputController', 'QtClock']

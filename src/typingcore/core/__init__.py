"""Typing session state machine, statistics and clocks."""

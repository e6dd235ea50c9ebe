"""Terminal UI for Interview Coach."""

from .coach_screen import CoachScreen, score_bar
from .keyboard_input import KeyboardInputHandler, SimpleInputHandler, create_input_handler

__all__ = [
    "CoachScreen",
    "score_bar",
    "KeyboardInputHandler",
    "SimpleInputHandler",
    "create_input_handler",
]

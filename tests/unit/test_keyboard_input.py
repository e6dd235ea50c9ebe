"""Unit tests for keyboard input handlers."""

import threading
from unittest.mock import patch

import pytest

from interviewcoach.ui.keyboard_input import KeyboardInputHandler, SimpleInputHandler, create_input_handler


@pytest.mark.unit
class TestSimpleInputHandler:
    """Test cases for the line-based input fallback."""

    def run_lines(self, lines):
        keys = []
        done = threading.Event()

        def on_key(key):
            keys.append(key)
            if key == "q":
                done.set()
                return False
            return True

        with patch("builtins.input", side_effect=lines):
            handler = SimpleInputHandler(on_key)
            handler.start()
            assert done.wait(timeout=5.0)
            handler.thread.join(timeout=5.0)

        return keys, handler

    def test_first_character_is_the_key(self):
        keys, handler = self.run_lines(["Next", "", "q"])

        assert keys == ["n", " ", "q"]
        assert handler.running is False

    def test_end_of_input_quits(self):
        keys, _ = self.run_lines(["r", EOFError()])

        assert keys == ["r", "q"]


@pytest.mark.unit
def test_create_input_handler_picks_by_terminal():
    with patch("sys.stdin") as stdin:
        stdin.isatty.return_value = True
        assert isinstance(create_input_handler(lambda key: True), KeyboardInputHandler)

        stdin.isatty.return_value = False
        assert isinstance(create_input_handler(lambda key: True), SimpleInputHandler)

"""
Non-blocking single character keyboard input for the operator terminal
"""

import logging
import os
import select
import sys
import termios
from typing import Optional, TextIO

class KeyboardInput:
    """
    Raw-mode terminal reader.

    Use as a context manager: canonical mode and echo are switched off on
    entry and the original terminal attributes are restored on exit.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdin
        self.logger = logging.getLogger(__name__)
        self._saved_attrs = None

    def __enter__(self) -> 'KeyboardInput':
        self.set_raw(True)
        return self

    def __exit__(self, exc_type, exc, tb):
        self.set_raw(False)

    def set_raw(self, enable: bool):
        """Toggle canonical mode and echo"""
        fd = self.stream.fileno()
        if not os.isatty(fd):
            self.logger.warning("Input is not a terminal; raw mode unavailable")
            return
        if enable:
            self._saved_attrs = termios.tcgetattr(fd)
            attrs = termios.tcgetattr(fd)
            attrs[3] &= ~(termios.ICANON | termios.ECHO)
            attrs[6][termios.VMIN] = 0
            attrs[6][termios.VTIME] = 0
            termios.tcsetattr(fd, termios.TCSANOW, attrs)
        elif self._saved_attrs is not None:
            termios.tcsetattr(fd, termios.TCSANOW, self._saved_attrs)
            self._saved_attrs = None

    def has_input(self) -> bool:
        readable, _, _ = select.select([self.stream.fileno()], [], [], 0)
        return bool(readable)

    def read_char(self) -> str:
        data = os.read(self.stream.fileno(), 1)
        return data.decode(errors="ignore") if data else ""

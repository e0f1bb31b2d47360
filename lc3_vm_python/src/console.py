# console.py

# Copyright (C) 2025 The LC3-VM authors. License: GNU GPL Version 3
# See LC3-VM/README and LICENSE

# This file is part of LC3-VM. LC3-VM is free software: you can
# redistribute it and/or modify it under the terms of the GNU General
# Public License as published by the Free Software Foundation, either
# version 3 of the License, or (at your option) any later version.
# LC3-VM is distributed in the hope that it will be useful, but
# WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the GNU
# General Public License for more details. You should have received
# a copy of the GNU General Public License along with LC3-VM. If
# not, see <https://www.gnu.org/licenses/>.

# ----------------------------------------------------------------------
# console.py defines the character devices the machine talks to: the
# keyboard (read by the GETC and IN traps and the KBSR/KBDR device
# registers) and the display (written by OUT, PUTS and PUTSP).
# ----------------------------------------------------------------------

import os
import sys
from abc import ABC, abstractmethod
from collections import deque

import common

class Console(ABC):
    """Character input/output used by the emulator."""

    @abstractmethod
    def read_char(self) -> int:
        """Read one character code, blocking until one is available"""
        pass

    @abstractmethod
    def key_ready(self) -> bool:
        """Return True if read_char would not block"""
        pass

    @abstractmethod
    def write_char(self, code: int):
        """Write one character given by its 8-bit code"""
        pass

    def write_text(self, text: str):
        for c in text:
            self.write_char(ord(c) & 0xFF)

    def flush(self):
        pass

# ----------------------------------------------------------------------
# Buffered console
# ----------------------------------------------------------------------

class BufferConsole(Console):
    """Console with scripted input and captured output.

    Input is consumed one character at a time from the text given to
    the constructor or to provide_input(). Output accumulates until
    get_output() is called. Running out of input raises InputExhausted
    instead of blocking forever.
    """

    def __init__(self, input_text: str = ""):
        self.input_buffer = deque()
        self.output = []
        self.provide_input(input_text)

    def provide_input(self, text: str):
        self.input_buffer.extend(ord(c) & 0xFF for c in text)

    def read_char(self) -> int:
        if not self.input_buffer:
            raise common.InputExhausted()
        return self.input_buffer.popleft()

    def key_ready(self) -> bool:
        return len(self.input_buffer) > 0

    def write_char(self, code: int):
        self.output.append(chr(code & 0xFF))

    def get_output(self) -> str:
        return ''.join(self.output)

    def clear_output(self):
        self.output = []

# ----------------------------------------------------------------------
# Terminal console
# ----------------------------------------------------------------------

class TerminalConsole(Console):
    """Console on the controlling terminal, in cbreak mode.

    Use as a context manager: the terminal is put into cbreak mode
    (no line buffering, no echo) on entry and the saved settings are
    always restored on exit. When stdin is not a terminal (a pipe or a
    file) it is read as is.
    """

    def __init__(self, stdin=None, stdout=None):
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.fd = self.stdin.fileno()
        self.old_settings = None

    def __enter__(self):
        if os.isatty(self.fd):
            import termios
            import tty
            self.old_settings = termios.tcgetattr(self.fd)
            tty.setcbreak(self.fd)
        return self

    def __exit__(self, exc_type, exc, tb):
        self.flush()
        if self.old_settings is not None:
            import termios
            termios.tcsetattr(self.fd, termios.TCSADRAIN, self.old_settings)
            self.old_settings = None
        return False

    def read_char(self) -> int:
        self.flush()
        ch = os.read(self.fd, 1)
        if not ch:
            raise common.InputExhausted()
        c = ch[0]
        # Enter may arrive as CR; programs expect LF
        return 0x0A if c == 0x0D else c

    def key_ready(self) -> bool:
        import select
        r, _, _ = select.select([self.fd], [], [], 0)
        return len(r) > 0

    # Characters are bytes; a text stream would encode codes from
    # x80 up as more than one byte

    def write_char(self, code: int):
        buffer = getattr(self.stdout, "buffer", None)
        if buffer is not None:
            buffer.write(bytes([code & 0xFF]))
        else:
            self.stdout.write(chr(code & 0xFF))

    def flush(self):
        self.stdout.flush()

# common.py

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
# common.py
# ----------------------------------------------------------------------

import sys

# Trace and error messages go to stderr; stdout belongs to the
# program running on the machine.

class Mode:
    def __init__(self, stream=None):
        self.trace = False
        self.show_err = True
        self.stream = stream

    def out(self):
        return self.stream if self.stream is not None else sys.stderr

    def set_trace(self):
        self.trace = True

    def clear_trace(self):
        self.trace = False

    def devlog(self, xs):
        if self.trace:
            print(xs, file=self.out())

    def errlog(self, xs):
        if self.show_err:
            print(xs, file=self.out())

mode = Mode()

# ----------------------------------------------------------------------
# Logging error message
# ----------------------------------------------------------------------

def indicate_error(xs):
    mode.errlog(f"\033[91m\033[1m{xs}\033[0m") # ANSI escape codes for red and bold

# ----------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------

# EmulatorError covers conditions that arise while a program runs.
# InvalidFieldRequest is not one of them: it means a handler asked
# for an impossible bit range, which is a bug in the decode table.

class EmulatorError(Exception):
    pass

class MissingProgram(EmulatorError):
    def __init__(self):
        super().__init__("no program has been loaded into memory")

class UnimplementedTrap(EmulatorError):
    def __init__(self, vector, address, instr):
        self.vector = vector
        self.address = address
        self.instr = instr
        super().__init__(f"trap code not implemented: x{vector:02x} "
                         f"(instruction x{instr:04x} at x{address:04x})")

class InputExhausted(EmulatorError):
    def __init__(self):
        super().__init__("console input exhausted")

class InvalidFieldRequest(AssertionError):
    def __init__(self, hi, lo):
        self.hi = hi
        self.lo = lo
        super().__init__(f"invalid bit field request hi={hi} lo={lo}")

class ObjectFileError(Exception):
    pass

# objfile.py

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

# -------------------------------------------------------------------------
# objfile.py reads object files. An object file is a sequence of
# big-endian 16-bit words: the first is the origin, the address where
# the program is placed, and the rest are copied to memory from there.
# -------------------------------------------------------------------------

import struct
from pathlib import Path

import common
import architecture as arch
import arithmetic as arith

def check_fits(origin, words):
    if origin + len(words) > arch.mem_size:
        raise common.ObjectFileError(
            f"program of {len(words)} words at origin x{arith.word_to_hex4(origin)} "
            f"does not fit in memory")

def parse_object_bytes(data):
    if len(data) < 2:
        raise common.ObjectFileError("object file too short to hold an origin")
    if len(data) % 2 != 0:
        raise common.ObjectFileError(f"object file has odd length {len(data)}")
    n = len(data) // 2
    origin, *words = struct.unpack(f">{n}H", data)
    check_fits(origin, words)
    common.mode.devlog(f"Origin memory location: x{arith.word_to_hex4(origin)}, "
                       f"{len(words)} words")
    return origin, words

def read_object_file(path):
    data = Path(path).read_bytes()
    return parse_object_bytes(data)

def build_memory_image(origin, words):
    check_fits(origin, words)
    image = [0] * arch.mem_size
    image[origin:origin + len(words)] = words
    return image

def load_object_file(path):
    origin, words = read_object_file(path)
    return build_memory_image(origin, words)

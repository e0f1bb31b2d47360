# arithmetic.py

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

# ------------------------------------------------------------------------
# arithmetic.py defines arithmetic for the architecture using
# Python arithmetic. This includes word representation, data
# conversions, and the extraction of instruction fields.
# ------------------------------------------------------------------------

import common
import architecture as arch

word16mask = 0x0000FFFF

# ------------------------------------------------------------------------
# Ensuring and asserting validity of words
# ------------------------------------------------------------------------

# A word is represented as a nonnegative integer x with
# 0 <= x < 2^16. Registers and addresses wrap around, which is
# implemented by anding with word16mask.

def limit16(x):
    return x & word16mask

def assert16(x):
    if 0 <= x < 2**16:
        return x
    else:
        common.indicate_error(f"assert16 fail: {x}")
        return x & 0x0000FFFF

# ------------------------------------------------------------------------
# Words, binary numbers, and two's complement integers
# ------------------------------------------------------------------------

const8000 = 32768  # 2^15
const10000 = 65536  # 2^16

def word_to_int(w):
    x = assert16(w)
    return x if x < const8000 else x - const10000

# ------------------------------------------------------------------------
# Operating on fields of a word
# ------------------------------------------------------------------------

# A field is given by the indices of its highest and lowest bits,
# both inclusive. Asking for a field that does not lie within a
# 16-bit word can only come from a wrong decode table, so it is
# reported as an assertion failure rather than truncated.

def extract_unsigned(w, hi, lo):
    if not (0 <= lo <= hi <= 15):
        raise common.InvalidFieldRequest(hi, lo)
    width = hi - lo + 1
    return (limit16(w) >> lo) & ((1 << width) - 1)

# The most significant bit of the field is its sign; when it is set
# every bit above it is filled with 1, giving the 16-bit two's
# complement representation of the field value.

def extract_signed(w, hi, lo):
    x = extract_unsigned(w, hi, lo)
    sign = hi - lo
    if arch.get_bit_in_word_le(x, sign):
        x |= limit16(word16mask << sign)
    return x

def split_word(x):
    y = assert16(x)
    s = y & 0x000F
    y = y >> 4
    r = y & 0x000F
    y = y >> 4
    q = y & 0x000F
    y = y >> 4
    p = y & 0x000F
    return [p, q, r, s]

# ------------------------------------------------------------------------
# Hexadecimal notation
# ------------------------------------------------------------------------

hex_digit = ['0', '1', '2', '3', '4', '5', '6', '7', '8', '9', 'a', 'b', 'c', 'd', 'e', 'f']

def word_to_hex4(x):
    p, q, r, s = split_word(limit16(x))
    result = hex_digit[p] + hex_digit[q] + hex_digit[r] + hex_digit[s]
    return result

# ------------------------------------------------------------------------
# Bitwise logic and addition on words
# ------------------------------------------------------------------------

def word_invert(x):
    return x ^ 0x0000FFFF

def word_and(x, y):
    return x & y & 0x0000FFFF

def bin_add(x, y):
    r = x + y
    return r & 0x0000FFFF

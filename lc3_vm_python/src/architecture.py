# architecture.py

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

# --------------------------------------------------------------------
# architecture.py defines global constants and tables specifying
# opcodes, mnemonics, trap vectors, device addresses and flag bits
# --------------------------------------------------------------------

# --------------------------------------------------------------------
# Bit indexing
# --------------------------------------------------------------------

# Bits are indexed Little End: the least significant bit of a word
# has index 0 and the most significant bit of a 16-bit word has
# index 15. Instruction fields are written hi..lo in this notation,
# so the opcode is bits 15..12.

def get_bit_in_word_le(w, i):
    return (w >> i) & 0x0001

# Return Boolean from bit i in word x

def extract_bool_le(x, i):
    return get_bit_in_word_le(x, i) == 1

# --------------------------------------------------------------------
# Architecture constants
# --------------------------------------------------------------------

mem_size = 65536  # number of memory locations = 2^16
words_per_line = 8
n_gen_registers = 8

# Programs conventionally begin at x3000; everything below is
# reserved for the trap table, interrupt table and operating system.

pc_start = 0x3000

# Memory mapped registers

kbsr_addr = 0xFE00  # keyboard status, bit 15 = character available
kbdr_addr = 0xFE02  # keyboard data, latched character code
kbsr_ready = 0x8000

# The last location of memory counts executed instructions

cycle_counter_addr = 0xFFFF

# --------------------------------------------------------------------
# Condition code register
# --------------------------------------------------------------------

# The condition register holds the three flags in its low bits,
# in the same order as the n, z, p bits of a BR instruction.

bit_ccN = 2
bit_ccZ = 1
bit_ccP = 0

ccN = 1 << bit_ccN
ccZ = 1 << bit_ccZ
ccP = 1 << bit_ccP

def show_cc(c):
    return (("n" if extract_bool_le(c, bit_ccN) else ".") +
            ("z" if extract_bool_le(c, bit_ccZ) else ".") +
            ("p" if extract_bool_le(c, bit_ccP) else "."))

# --------------------------------------------------------------------
# Opcodes
# --------------------------------------------------------------------

# Mnemonics indexed by opcode, used in trace output

mnemonic = [
    "br",     # 0
    "add",    # 1
    "ld",     # 2
    "st",     # 3
    "jsr",    # 4
    "and",    # 5
    "ldr",    # 6
    "str",    # 7
    "rti",    # 8
    "not",    # 9
    "ldi",    # a
    "sti",    # b
    "jmp",    # c
    "res",    # d
    "lea",    # e
    "trap"    # f
]

# --------------------------------------------------------------------
# Trap vectors
# --------------------------------------------------------------------

trap_getc = 0x20   # read a character, no echo
trap_out = 0x21    # write a character
trap_puts = 0x22   # write a string of one character per word
trap_in = 0x23     # prompt, read and echo a character
trap_putsp = 0x24  # write a string of two characters per word
trap_halt = 0x25   # stop the machine

trap_mnemonic = {
    trap_getc: "getc",
    trap_out: "out",
    trap_puts: "puts",
    trap_in: "in",
    trap_putsp: "putsp",
    trap_halt: "halt"
}

in_prompt = "Enter a character: "

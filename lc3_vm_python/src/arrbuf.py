# arrbuf.py

# Copyright (C) 2025 The LC3-VM authors. License: GNU GPL
# Version 3. See LC3-VM/README and LICENSE

# This file is part of LC3-VM. LC3-VM is free software:
# you can redistribute it and/or modify it under the terms
# of the GNU General Public License as published by the Free
# Software Foundation, Version 3 of the License. LC3-VM is
# distributed in the hope that it will be useful, but
# WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See
# the GNU General Public License for more details. You
# should have received a copy of the GNU General Public
# License along with LC3-VM. If not, see
# <https://www.gnu.org/licenses/>.

# arrbuf.py defines the system state vector: a vector of
# 16-bit words holding the registers and the memory, and a
# vector of 32-bit words holding the system control block.

import arithmetic as arith
import architecture as arch

# -------------------------------------------------------------
# Memory map of the emulator state vectors
# -------------------------------------------------------------

SCB_SIZE = 16  # emulator variables, 32-bit elements
REG_SIZE = 16  # registers, 16-bit elements
MEM_SIZE = arch.mem_size  # each location is 16 bits

# Offsets of the 16-bit state vector sections

REG_OFFSET16 = 0
MEM_OFFSET16 = REG_OFFSET16 + REG_SIZE

STATE_VEC16_SIZE = REG_SIZE + MEM_SIZE
STATE_VEC32_SIZE = SCB_SIZE

def new_vec16():
    return [0] * STATE_VEC16_SIZE

def new_vec32():
    return [0] * STATE_VEC32_SIZE

# -------------------------------------------------------------
# General access functions
# -------------------------------------------------------------

def limit32(x):
    return x & 0xFFFFFFFF

def read16(es, a, k):
    return arith.limit16(es.vec16[a + k])

def write16(es, a, k, x):
    es.vec16[a + k] = arith.limit16(x)

def read32(es, a):
    return limit32(es.vec32[a])

def write32(es, a, x):
    es.vec32[a] = limit32(x)

# -------------------------------------------------------------
# System control block
# -------------------------------------------------------------

SCB_N_INSTR_EXECUTED = 0  # count instr executed
SCB_STATUS = 1  # run state of the processor
SCB_LOADED = 2  # a program image is in memory

# SCB access functions

def write_scb(es, elt, x):
    write32(es, elt, x)

def read_scb(es, elt):
    return read32(es, elt)

# SCB_STATUS codes are the two run states of the processor

SCB_STOPPED = 0  # initial state, after halt or fatal error
SCB_RUNNING = 1  # executing instructions

# Clear the SCB, putting the system into initial state. Whether
# a program is loaded survives a reset.

def reset_scb(es):
    clear_instr_count(es)
    write_scb(es, SCB_STATUS, SCB_STOPPED)

# Convert the numeric status to a descriptive string; this
# is shown in the processor display

def show_scb_status(es):
    status = read_scb(es, SCB_STATUS)
    if status == SCB_STOPPED:
        return "Stopped"
    elif status == SCB_RUNNING:
        return "Running"
    else:
        return ""

def write_instr_count(es, n):
    write32(es, SCB_N_INSTR_EXECUTED, n)

def read_instr_count(es):
    return read32(es, SCB_N_INSTR_EXECUTED)

def clear_instr_count(es):
    write_instr_count(es, 0)

def incr_instr_count(es):
    write_instr_count(es, read_instr_count(es) + 1)

# -------------------------------------------------------------
# Registers
# -------------------------------------------------------------

def read_reg16(es, r):
    return read16(es, r, REG_OFFSET16)

def write_reg16(es, r, x):
    write16(es, r, REG_OFFSET16, x)

# -------------------------------------------------------------
# Memory
# -------------------------------------------------------------

def read_mem16(es, a):
    return read16(es, arith.limit16(a), MEM_OFFSET16)

def write_mem16(es, a, x):
    write16(es, arith.limit16(a), MEM_OFFSET16, x)

def copy_mem16(es, image):
    es.vec16[MEM_OFFSET16:MEM_OFFSET16 + MEM_SIZE] = [arith.limit16(x) for x in image]

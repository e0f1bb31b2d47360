# traps.py

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
# traps.py defines the service routines invoked by the TRAP instruction.
# They are executed directly by the emulator rather than by operating
# system code in memory, and R7 is not used as a return address.
# -------------------------------------------------------------------------

import common
import architecture as arch
import arithmetic as arith
import emulator as em

# -------------------------------------------------------------------------
# Character input
# -------------------------------------------------------------------------

def trap_getc(es):
    c = es.console.read_char()
    common.mode.devlog(f"getc {c}")
    es.regfile[0].put(c & 0x00FF)

def trap_in(es):
    es.console.write_text(arch.in_prompt)
    es.console.flush()
    trap_getc(es)
    trap_out(es)

# -------------------------------------------------------------------------
# Character output
# -------------------------------------------------------------------------

def trap_out(es):
    es.console.write_char(es.regfile[0].get() & 0x00FF)
    es.console.flush()

# Both string routines follow R0 through memory, wrapping at the top of
# the address space; a string without a terminator ends after one pass
# over the whole of memory.

def trap_puts(es):
    a = es.regfile[0].get()
    for _ in range(arch.mem_size):
        x = em.mem_fetch_data(es, a)
        if x == 0:
            break
        es.console.write_char(x & 0x00FF)
        a = arith.bin_add(a, 1)
    es.console.flush()

def trap_putsp(es):
    a = es.regfile[0].get()
    for _ in range(arch.mem_size):
        x = em.mem_fetch_data(es, a)
        lo = x & 0x00FF
        if lo == 0:
            break
        es.console.write_char(lo)
        hi = x >> 8
        if hi == 0:
            break
        es.console.write_char(hi)
        a = arith.bin_add(a, 1)
    es.console.flush()

# -------------------------------------------------------------------------
# Stopping the machine
# -------------------------------------------------------------------------

def trap_halt(es):
    common.mode.devlog("Trap: halt")
    es.console.flush()
    em.stop(es)

dispatch_trap = {
    arch.trap_getc: trap_getc,
    arch.trap_out: trap_out,
    arch.trap_puts: trap_puts,
    arch.trap_in: trap_in,
    arch.trap_putsp: trap_putsp,
    arch.trap_halt: trap_halt
}

def execute_trap(es, vector):
    handler = dispatch_trap.get(vector)
    if handler is None:
        raise common.UnimplementedTrap(vector, es.cur_instr_addr, es.instr_code)
    common.mode.devlog(f"trap {arch.trap_mnemonic[vector]}")
    handler(es)

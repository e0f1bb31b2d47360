# emulator.py

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
# emulator.py defines the machine language semantics
# -------------------------------------------------------------------------

import common
import architecture as arch
import arithmetic as arith
import arrbuf as ab
import traps
from console import BufferConsole

# ------------------------------------------------------------------------
# Emulator state
# ------------------------------------------------------------------------

# The access logs record what the current instruction touched, so a
# display can highlight it. They are cleared at the start of every
# instruction.

def new_copyable():
    return {
        "regFetched": [],
        "regStored": [],
        "memFetchInstrLog": [],
        "memFetchDataLog": [],
        "memStoreLog": []
    }

class EmulatorState:
    """All of the state of one machine.

    Registers and memory live in the state vectors defined in arrbuf;
    the console is the keyboard and display the machine is attached to.
    Nothing is shared between instances, so several machines can exist
    side by side.
    """

    def __init__(self, console=None):
        self.ab = ab
        self.console = console if console is not None else BufferConsole()
        self.vec16 = self.ab.new_vec16()
        self.vec32 = self.ab.new_vec32()
        self.copyable = new_copyable()

        # Registers stored and addresses accessed since the last reset
        self.regs_modified = set()
        self.mem_accessed = set()

        self.n_registers = 0
        self.register = []
        self.regfile = []

        self.instr_code = 0
        self.ir_op = 0
        self.ir_d = 0
        self.ir_a = 0
        self.ir_b = 0
        self.cur_instr_addr = 0
        self.next_instr_addr = 0

        for i in range(arch.n_gen_registers):
            self.regfile.append(GenRegister(self, f'R{i}'))

        self.pc = GenRegister(self, 'pc')
        self.ir = GenRegister(self, 'ir')
        self.cond = GenRegister(self, 'cond', arch.show_cc)

        self.control_registers = [self.pc, self.ir, self.cond]

        reset(self)

class GenRegister:
    def __init__(self, es, reg_name, show_fcn=arith.word_to_hex4):
        self.es = es
        self.reg_number = es.n_registers
        es.n_registers += 1
        self.reg_name = reg_name
        self.show = show_fcn
        es.register.append(self)

    def get(self):
        x = self.es.ab.read_reg16(self.es, self.reg_number)
        self.es.copyable["regFetched"].append((self.reg_number, x))
        return x

    def peek(self):
        return self.es.ab.read_reg16(self.es, self.reg_number)

    def put(self, x):
        self.es.copyable["regStored"].append((self.reg_number, x))
        self.es.regs_modified.add(self.reg_number)
        self.es.ab.write_reg16(self.es, self.reg_number, x)

def reset_registers(es):
    common.mode.devlog(f"Resetting registers {es.n_registers}")
    for r in es.register:
        es.ab.write_reg16(es, r.reg_number, 0)

def clear_logging(es):
    es.copyable = new_copyable()

# -------------------------------------------------------------------------
# Condition codes
# -------------------------------------------------------------------------

# Exactly one flag is set by every result: the word is read as a
# two's complement number, so bit 15 is the sign.

def set_condition_codes(es, x):
    x = arith.limit16(x)
    if x == 0:
        c = arch.ccZ
    elif arch.get_bit_in_word_le(x, 15):
        c = arch.ccN
    else:
        c = arch.ccP
    es.cond.put(c)

def get_condition_codes(es):
    c = es.cond.get()
    return (arch.extract_bool_le(c, arch.bit_ccN),
            arch.extract_bool_le(c, arch.bit_ccZ),
            arch.extract_bool_le(c, arch.bit_ccP))

def put_result(es, d, x):
    es.regfile[d].put(x)
    set_condition_codes(es, x)

# -------------------------------------------------------------------------
# Memory
# -------------------------------------------------------------------------

# Every address is valid. Reading the keyboard status register asks
# the console whether a key is waiting; if so the character is taken
# and latched in the keyboard data register.

def mem_read(es, a):
    a = arith.limit16(a)
    if a == arch.kbsr_addr:
        if es.console.key_ready():
            es.ab.write_mem16(es, arch.kbsr_addr, arch.kbsr_ready)
            es.ab.write_mem16(es, arch.kbdr_addr, es.console.read_char())
        else:
            es.ab.write_mem16(es, arch.kbsr_addr, 0)
    return es.ab.read_mem16(es, a)

def mem_write(es, a, x):
    es.ab.write_mem16(es, a, x)

def mem_fetch_instr(es, a):
    x = mem_read(es, a)
    es.copyable["memFetchInstrLog"].append((a, x))
    es.mem_accessed.add(a)
    return x

def mem_fetch_data(es, a):
    x = mem_read(es, a)
    es.copyable["memFetchDataLog"].append((a, x))
    es.mem_accessed.add(a)
    return x

def mem_store(es, a, x):
    es.copyable["memStoreLog"].append((a, x))
    es.mem_accessed.add(a)
    mem_write(es, a, x)

def incr_cycle_counter(es):
    x = es.ab.read_mem16(es, arch.cycle_counter_addr)
    es.ab.write_mem16(es, arch.cycle_counter_addr, arith.bin_add(x, 1))

# -------------------------------------------------------------------------
# Initialize machine state
# -------------------------------------------------------------------------

def reset(es):
    common.mode.devlog("reset the processor")
    es.ab.reset_scb(es)
    clear_logging(es)
    es.regs_modified = set()
    es.mem_accessed = set()
    es.ab.write_reg16(es, es.pc.reg_number, arch.pc_start)
    es.ab.write_reg16(es, es.cond.reg_number, 0)
    es.cur_instr_addr = arch.pc_start
    es.next_instr_addr = arch.pc_start

def is_loaded(es):
    return es.ab.read_scb(es, es.ab.SCB_LOADED) != 0

# Boot from a complete memory image, as produced by the object file
# loader, starting the machine from power-on state.

def boot(es, image):
    common.mode.devlog('em.boot')
    if len(image) != arch.mem_size:
        raise ValueError(f"memory image has {len(image)} words, expected {arch.mem_size}")
    reset_registers(es)
    es.ab.copy_mem16(es, image)
    es.ab.write_scb(es, es.ab.SCB_LOADED, 1)
    reset(es)

# Place words in memory starting at origin without disturbing the
# rest of the state.

def load_words(es, origin, words):
    common.mode.devlog(f"em.load_words origin={arith.word_to_hex4(origin)} n={len(words)}")
    for i, x in enumerate(words):
        mem_write(es, origin + i, x)
    es.ab.write_scb(es, es.ab.SCB_LOADED, 1)

# -------------------------------------------------------------------------
# Controlling instruction execution
# -------------------------------------------------------------------------

def is_running(es):
    return es.ab.read_scb(es, es.ab.SCB_STATUS) == es.ab.SCB_RUNNING

def stop(es):
    es.ab.write_scb(es, es.ab.SCB_STATUS, es.ab.SCB_STOPPED)

def run(es, limit=None):
    """Execute instructions until the machine stops.

    Returns the number of instructions executed by this call. With a
    limit, at most that many are executed and the machine may still
    be running afterwards. A fatal error propagates to the caller with
    the machine stopped.
    """
    if not is_loaded(es):
        raise common.MissingProgram()
    icount = 0
    while limit is None or icount < limit:
        step(es)
        icount += 1
        if not is_running(es):
            break
    else:
        common.mode.devlog(f"instruction limit {limit} reached")
    common.mode.devlog(f"run finished after {icount} instructions, "
                       f"status={es.ab.show_scb_status(es)}")
    return icount

# A fatal error stops the machine before it reaches the caller; the PC
# is left at the failing instruction.

def step(es):
    if not is_loaded(es):
        raise common.MissingProgram()
    clear_logging(es)
    es.ab.write_scb(es, es.ab.SCB_STATUS, es.ab.SCB_RUNNING)
    try:
        execute_instruction(es)
    except common.EmulatorError:
        stop(es)
        raise
    es.pc.put(es.next_instr_addr)
    es.ab.incr_instr_count(es)
    incr_cycle_counter(es)

def execute_instruction(es):
    executed_instr_addr = es.pc.get()
    es.cur_instr_addr = executed_instr_addr

    es.instr_code = mem_fetch_instr(es, executed_instr_addr)
    es.ir.put(es.instr_code)
    es.next_instr_addr = arith.bin_add(executed_instr_addr, 1)

    es.ir_op = arith.extract_unsigned(es.instr_code, 15, 12)
    es.ir_d = arith.extract_unsigned(es.instr_code, 11, 9)
    es.ir_a = arith.extract_unsigned(es.instr_code, 8, 6)
    es.ir_b = arith.extract_unsigned(es.instr_code, 2, 0)

    common.mode.devlog(f"{arith.word_to_hex4(executed_instr_addr)} "
                       f"{arith.word_to_hex4(es.instr_code)} "
                       f"{arch.mnemonic[es.ir_op]}")

    dispatch_primary_opcode[es.ir_op](es)

# -------------------------------------------------------------------------
# Effective addresses
# -------------------------------------------------------------------------

# PC relative addresses are formed from the address of the following
# instruction, as the PC has already been incremented by the fetch.

def pc_relative(es):
    return arith.bin_add(es.next_instr_addr, arith.extract_signed(es.instr_code, 8, 0))

def base_offset(es):
    return arith.bin_add(es.regfile[es.ir_a].get(), arith.extract_signed(es.instr_code, 5, 0))

# -------------------------------------------------------------------------
# Instruction pattern functions
# -------------------------------------------------------------------------

def nop(es):
    pass

# Second operand is either register b or the sign extended imm5 field,
# selected by bit 5

def alu(f):
    def inner(es):
        a = es.regfile[es.ir_a].get()
        if arch.extract_bool_le(es.instr_code, 5):
            b = arith.extract_signed(es.instr_code, 4, 0)
        else:
            b = es.regfile[es.ir_b].get()
        put_result(es, es.ir_d, f(a, b))
    return inner

def rd(f):
    def inner(es):
        a = es.regfile[es.ir_a].get()
        put_result(es, es.ir_d, f(a))
    return inner

# -------------------------------------------------------------------------
# Control flow
# -------------------------------------------------------------------------

def op_br(es):
    n = arch.extract_bool_le(es.instr_code, 11)
    z = arch.extract_bool_le(es.instr_code, 10)
    p = arch.extract_bool_le(es.instr_code, 9)
    cc_n, cc_z, cc_p = get_condition_codes(es)
    if (n and cc_n) or (z and cc_z) or (p and cc_p):
        es.next_instr_addr = pc_relative(es)
        common.mode.devlog(f"br taken to {arith.word_to_hex4(es.next_instr_addr)}")

def op_jmp(es):
    es.next_instr_addr = es.regfile[es.ir_a].get()

# The return address goes to R7 before the target is taken, so JSRR
# through R7 jumps to the instruction after itself.

def op_jsr(es):
    es.regfile[7].put(es.next_instr_addr)
    if arch.extract_bool_le(es.instr_code, 11):
        es.next_instr_addr = arith.bin_add(es.next_instr_addr,
                                           arith.extract_signed(es.instr_code, 10, 0))
    else:
        es.next_instr_addr = es.regfile[es.ir_a].get()

def op_trap(es):
    vector = arith.extract_unsigned(es.instr_code, 7, 0)
    traps.execute_trap(es, vector)

# -------------------------------------------------------------------------
# Loads and stores
# -------------------------------------------------------------------------

def op_ld(es):
    put_result(es, es.ir_d, mem_fetch_data(es, pc_relative(es)))

def op_ldi(es):
    a = mem_fetch_data(es, pc_relative(es))
    put_result(es, es.ir_d, mem_fetch_data(es, a))

def op_ldr(es):
    put_result(es, es.ir_d, mem_fetch_data(es, base_offset(es)))

def op_lea(es):
    put_result(es, es.ir_d, pc_relative(es))

def op_st(es):
    mem_store(es, pc_relative(es), es.regfile[es.ir_d].get())

def op_sti(es):
    a = mem_fetch_data(es, pc_relative(es))
    mem_store(es, a, es.regfile[es.ir_d].get())

def op_str(es):
    mem_store(es, base_offset(es), es.regfile[es.ir_d].get())

dispatch_primary_opcode = [
    op_br,                    # 0
    alu(arith.bin_add),       # 1
    op_ld,                    # 2
    op_st,                    # 3
    op_jsr,                   # 4
    alu(arith.word_and),      # 5
    op_ldr,                   # 6
    op_str,                   # 7
    nop,                      # 8 rti
    rd(arith.word_invert),    # 9
    op_ldi,                   # a
    op_sti,                   # b
    op_jmp,                   # c
    nop,                      # d res
    op_lea,                   # e
    op_trap                   # f
]

# -------------------------------------------------------------------------
# Output functions
# -------------------------------------------------------------------------

def dump_registers(es):
    print("\n--- Registers ---")
    for reg in es.regfile:
        x = reg.peek()
        print(f"{reg.reg_name}: {arith.word_to_hex4(x)} ({arith.word_to_int(x)})")

    print("\n--- Control Registers ---")
    control_reg_names = {
        'pc': 'Program Counter', 'ir': 'Instruction Register',
        'cond': 'Condition Codes'
    }
    for reg in es.control_registers:
        print(f"{control_reg_names[reg.reg_name]} ({reg.reg_name}): {reg.show(reg.peek())}")
    print(f"Status: {es.ab.show_scb_status(es)}")
    print(f"Instructions executed: {es.ab.read_instr_count(es)}")
    print("-----------------")

def dump_modified_registers_summary(es):
    if not es.regs_modified:
        print("\n--- No Registers Modified ---")
        return

    print("\n--- Modified Registers Summary ---")
    for reg_num in sorted(es.regs_modified):
        reg = es.register[reg_num]
        x = reg.peek()
        print(f"{reg.reg_name}: {reg.show(x)} ({x})")
    print("--------------------------------")

def group_contiguous(addresses):
    groups = []
    for a in sorted(addresses):
        if groups and a == groups[-1][-1] + 1:
            groups[-1].append(a)
        else:
            groups.append([a])
    return groups

def dump_accessed_memory_summary(es):
    if not es.mem_accessed:
        print("\n--- No Memory Accessed ---")
        return

    print("\n--- Accessed Memory Summary ---")
    for group in group_contiguous(es.mem_accessed):
        start_addr = group[0]
        end_addr = group[-1]
        print(f"Addresses {arith.word_to_hex4(start_addr)} to {arith.word_to_hex4(end_addr)}:")

        current_line_start = start_addr
        while current_line_start <= end_addr:
            line_output = f"  MEM[{arith.word_to_hex4(current_line_start)}]: "
            for i in range(arch.words_per_line):
                addr_to_print = current_line_start + i
                if addr_to_print <= end_addr:
                    value = es.ab.read_mem16(es, addr_to_print)
                    line_output += f"{arith.word_to_hex4(value)} "
                else:
                    break
            print(line_output)
            current_line_start += arch.words_per_line
    print("-------------------------------")

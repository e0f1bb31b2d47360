import pytest

import common
import architecture as arch
import emulator as em
from console import BufferConsole

def machine(words, origin=0x3000, console=None):
    es = em.EmulatorState(console)
    em.load_words(es, origin, words)
    return es

def reg(es, i):
    return es.regfile[i].peek()

def test_emulator_init():
    es = em.EmulatorState()
    assert es is not None
    assert hasattr(es, 'ab')
    assert len(es.regfile) == 8
    assert es.pc.peek() == 0x3000
    assert em.get_condition_codes(es) == (False, False, False)
    assert not em.is_running(es)
    assert not em.is_loaded(es)

def test_instances_are_independent():
    es1 = machine([0x1021, 0xF025])
    es2 = machine([0x5020, 0xF025])
    em.run(es1)
    assert reg(es1, 0) == 1
    assert reg(es2, 0) == 0
    assert es2.ab.read_mem16(es2, 0x3000) == 0x5020

def test_condition_codes_partition_every_word():
    es = em.EmulatorState()
    for x in range(0x10000):
        em.set_condition_codes(es, x)
        flags = em.get_condition_codes(es)
        assert sum(flags) == 1
        n, z, p = flags
        assert z == (x == 0)
        assert n == (x >= 0x8000)
        assert p == (0 < x < 0x8000)

# -------------------------------------------------------------------------
# Operate instructions
# -------------------------------------------------------------------------

def test_add_immediate():
    es = machine([0x1223])              # add R1,R0,#3
    es.regfile[0].put(5)
    em.step(es)
    assert reg(es, 1) == 8
    assert em.get_condition_codes(es) == (False, False, True)
    assert es.pc.peek() == 0x3001

def test_add_register_and_negative_immediate():
    es = machine([0x1401, 0x103F])      # add R2,R0,R1 ; add R0,R0,#-1
    es.regfile[0].put(0x0002)
    es.regfile[1].put(0xFFFD)
    em.step(es)
    assert reg(es, 2) == 0xFFFF
    assert em.get_condition_codes(es) == (True, False, False)
    em.step(es)
    assert reg(es, 0) == 1
    assert em.get_condition_codes(es) == (False, False, True)

def test_add_wraps_modulo_2_16():
    es = machine([0x1021])              # add R0,R0,#1
    es.regfile[0].put(0xFFFF)
    em.step(es)
    assert reg(es, 0) == 0
    assert em.get_condition_codes(es) == (False, True, False)

def test_and_immediate_clears_register():
    es = machine([0x5020])              # and R0,R0,#0
    es.regfile[0].put(0x1234)
    em.step(es)
    assert reg(es, 0) == 0
    assert em.get_condition_codes(es) == (False, True, False)

def test_and_register():
    es = machine([0x5642])              # and R3,R1,R2
    es.regfile[1].put(0xFF0F)
    es.regfile[2].put(0x8F0F)
    em.step(es)
    assert reg(es, 3) == 0x8F0F
    assert em.get_condition_codes(es) == (True, False, False)

def test_not():
    es = machine([0x927F])              # not R1,R0
    es.regfile[0].put(0x00FF)
    em.step(es)
    assert reg(es, 1) == 0xFF00
    assert em.get_condition_codes(es) == (True, False, False)

# -------------------------------------------------------------------------
# Loads and stores
# -------------------------------------------------------------------------

def test_lea_uses_incremented_pc():
    es = machine([0xE005])              # lea R0,#5
    em.step(es)
    assert reg(es, 0) == 0x3006
    assert em.get_condition_codes(es) == (False, False, True)

def test_lea_wraps_below_zero():
    es = machine([0xE1FE], origin=0x0000)   # lea R0,#-2
    es.pc.put(0x0000)
    em.step(es)
    assert reg(es, 0) == 0xFFFF
    assert em.get_condition_codes(es) == (True, False, False)

def test_ld():
    es = machine([0x2402, 0x0000, 0x0000, 0x8001])   # ld R2,#2
    em.step(es)
    assert reg(es, 2) == 0x8001
    assert em.get_condition_codes(es) == (True, False, False)

def test_ldi_double_indirection():
    es = machine([0xA000, 0x4000])      # ldi R0,#0
    em.load_words(es, 0x4000, [0x1234])
    em.step(es)
    assert reg(es, 0) == 0x1234
    assert em.get_condition_codes(es) == (False, False, True)

def test_ldr_with_negative_offset():
    es = machine([0x673E])              # ldr R3,R4,#-2
    em.load_words(es, 0x4FFE, [0x0000])
    es.regfile[3].put(0x5555)
    es.regfile[4].put(0x5000)
    em.step(es)
    assert reg(es, 3) == 0
    assert em.get_condition_codes(es) == (False, True, False)

def test_st():
    es = machine([0x3003])              # st R0,#3
    es.regfile[0].put(0xBEEF)
    em.step(es)
    assert es.ab.read_mem16(es, 0x3004) == 0xBEEF

def test_sti_double_indirection():
    es = machine([0xB000, 0x4000])      # sti R0,#0
    es.regfile[0].put(0x0042)
    em.step(es)
    assert es.ab.read_mem16(es, 0x4000) == 0x0042
    assert es.ab.read_mem16(es, 0x3001) == 0x4000

def test_str_uses_decoded_registers():
    es = machine([0x74FF])              # str R2,R3,#-1
    es.regfile[0].put(0x1111)
    es.regfile[1].put(0x6000)
    es.regfile[2].put(0xCAFE)
    es.regfile[3].put(0x5001)
    em.step(es)
    assert es.ab.read_mem16(es, 0x5000) == 0xCAFE
    assert es.ab.read_mem16(es, 0x6000) == 0

def test_stores_leave_condition_codes_alone():
    # and R0,R0,#0 ; st R0,#3 ; sti R0,#1 ; str R0,R1,#2
    es = machine([0x5020, 0x3003, 0xB001, 0x7042])
    es.regfile[1].put(0x4100)
    em.run(es, limit=4)
    assert em.get_condition_codes(es) == (False, True, False)

# -------------------------------------------------------------------------
# Control flow
# -------------------------------------------------------------------------

@pytest.mark.parametrize("cc", [0, arch.ccN, arch.ccZ, arch.ccP])
def test_br_with_no_condition_never_branches(cc):
    es = machine([0x0005])              # br (nzp all clear) #5
    es.cond.put(cc)
    em.step(es)
    assert es.pc.peek() == 0x3001

def test_brz_taken_and_not_taken():
    es = machine([0x5020, 0x0403])      # and R0,R0,#0 ; brz #3
    em.run(es, limit=2)
    assert es.pc.peek() == 0x3005
    es = machine([0x1021, 0x0403])      # add R0,R0,#1 ; brz #3
    em.run(es, limit=2)
    assert es.pc.peek() == 0x3002

def test_brnzp_backwards():
    es = machine([0x1021, 0x0FFE])      # add R0,R0,#1 ; brnzp #-2
    em.run(es, limit=5)
    assert reg(es, 0) == 3
    assert es.pc.peek() == 0x3001

def test_jmp_and_ret():
    es = machine([0xC080])              # jmp R2
    es.regfile[2].put(0x4000)
    em.load_words(es, 0x4000, [0xC1C0]) # ret
    es.regfile[7].put(0x3123)
    em.step(es)
    assert es.pc.peek() == 0x4000
    em.step(es)
    assert es.pc.peek() == 0x3123

def test_jsr_offset():
    es = machine([0x4804])              # jsr #4
    em.step(es)
    assert reg(es, 7) == 0x3001
    assert es.pc.peek() == 0x3005

def test_jsr_negative_offset():
    es = machine([0x4FFF])              # jsr #-1
    em.step(es)
    assert reg(es, 7) == 0x3001
    assert es.pc.peek() == 0x3000

def test_jsrr():
    es = machine([0x40C0])              # jsrr R3
    es.regfile[3].put(0x5000)
    em.step(es)
    assert reg(es, 7) == 0x3001
    assert es.pc.peek() == 0x5000

def test_control_flow_leaves_condition_codes_alone():
    es = machine([0x4804])
    es.cond.put(arch.ccN)
    em.step(es)
    assert em.get_condition_codes(es) == (True, False, False)

@pytest.mark.parametrize("instr", [0x8000, 0xD000])
def test_rti_and_res_do_nothing(instr):
    es = machine([instr])
    es.regfile[0].put(7)
    es.cond.put(arch.ccP)
    em.step(es)
    assert es.pc.peek() == 0x3001
    assert reg(es, 0) == 7
    assert em.get_condition_codes(es) == (False, False, True)

# -------------------------------------------------------------------------
# Run state, cycle counter and errors
# -------------------------------------------------------------------------

def test_step_leaves_machine_running():
    es = machine([0x1021, 0xF025])
    em.step(es)
    assert em.is_running(es)
    assert es.ab.read_scb(es, es.ab.SCB_STATUS) == es.ab.SCB_RUNNING

def test_cycle_counter_counts_instructions():
    es = machine([0x1021, 0x1021, 0x1021, 0xF025])
    em.run(es)
    assert es.ab.read_mem16(es, arch.cycle_counter_addr) == 4
    assert es.ab.read_instr_count(es) == 4

def test_run_stops_at_halt():
    es = machine([0x1021, 0xF025])
    n = em.run(es)
    assert n == 2
    assert reg(es, 0) == 1
    assert not em.is_running(es)
    assert es.ab.show_scb_status(es) == "Stopped"

def test_run_with_limit_keeps_running():
    es = machine([0x0FFF])              # brnzp #-1, loops forever
    es.cond.put(arch.ccZ)
    n = em.run(es, limit=100)
    assert n == 100
    assert em.is_running(es)

def test_run_with_zero_limit_executes_nothing():
    es = machine([0x1021, 0xF025])
    assert em.run(es, limit=0) == 0
    assert reg(es, 0) == 0
    assert es.pc.peek() == 0x3000
    assert es.ab.read_instr_count(es) == 0

def test_run_with_limit_of_one():
    es = machine([0x1021, 0x1021, 0xF025])
    assert em.run(es, limit=1) == 1
    assert reg(es, 0) == 1

def test_run_without_program():
    es = em.EmulatorState()
    with pytest.raises(common.MissingProgram):
        em.run(es)
    with pytest.raises(common.MissingProgram):
        em.step(es)

def test_unknown_trap_stops_machine():
    es = machine([0x1021, 0xF0FF])      # add R0,R0,#1 ; trap xff
    with pytest.raises(common.UnimplementedTrap) as excinfo:
        em.run(es)
    assert excinfo.value.vector == 0xFF
    assert excinfo.value.address == 0x3001
    assert excinfo.value.instr == 0xF0FF
    assert not em.is_running(es)
    assert es.pc.peek() == 0x3001
    assert reg(es, 0) == 1

def test_trap_does_not_save_return_address():
    es = machine([0xF021], console=BufferConsole())
    es.regfile[7].put(0x1111)
    em.step(es)
    assert reg(es, 7) == 0x1111

def test_reset():
    es = machine([0x1021, 0xF025])
    em.run(es)
    em.reset(es)
    assert es.pc.peek() == 0x3000
    assert em.get_condition_codes(es) == (False, False, False)
    assert es.ab.read_instr_count(es) == 0
    assert reg(es, 0) == 1
    assert em.is_loaded(es)

def test_boot_from_image():
    image = [0] * arch.mem_size
    image[0x3000] = 0x1021
    image[0x3001] = 0xF025
    es = em.EmulatorState()
    es.regfile[0].put(41)
    em.boot(es, image)
    assert reg(es, 0) == 0
    em.run(es)
    assert reg(es, 0) == 1

def test_boot_rejects_short_image():
    es = em.EmulatorState()
    with pytest.raises(ValueError):
        em.boot(es, [0] * 10)

# -------------------------------------------------------------------------
# Keyboard device registers
# -------------------------------------------------------------------------

def test_keyboard_status_and_data():
    # ldi R0,#2 ; ldi R1,#2 ; halt ; .fill xfe00 ; .fill xfe02
    es = machine([0xA002, 0xA202, 0xF025, 0xFE00, 0xFE02], console=BufferConsole("a"))
    em.run(es)
    assert reg(es, 0) == 0x8000
    assert reg(es, 1) == ord('a')

def test_keyboard_status_without_input():
    es = machine([0xA000, 0xFE00], console=BufferConsole())
    em.step(es)
    assert reg(es, 0) == 0
    assert em.get_condition_codes(es) == (False, True, False)

# -------------------------------------------------------------------------
# Access logs
# -------------------------------------------------------------------------

def test_access_logs():
    es = machine([0x3003])              # st R0,#3
    es.regfile[0].put(9)
    em.step(es)
    assert es.copyable["memFetchInstrLog"] == [(0x3000, 0x3003)]
    assert es.copyable["memStoreLog"] == [(0x3004, 9)]
    assert 0x3004 in es.mem_accessed
    assert es.regfile[0].reg_number in es.regs_modified

def test_dump_registers(capsys):
    es = machine([0x1021, 0xF025])
    em.run(es)
    em.dump_registers(es)
    em.dump_modified_registers_summary(es)
    em.dump_accessed_memory_summary(es)
    out = capsys.readouterr().out
    assert "R0: 0001 (1)" in out
    assert "Program Counter (pc): 3002" in out
    assert "Instructions executed: 2" in out
    assert "Addresses 3000 to 3001:" in out
    assert "Modified Registers Summary" in out

def test_modified_registers_since_boot(capsys):
    image = [0] * arch.mem_size
    image[0x3000:0x3002] = [0x1221, 0xF025]     # add R1,R0,#1 ; halt
    es = em.EmulatorState()
    em.boot(es, image)
    em.dump_modified_registers_summary(es)
    assert "No Registers Modified" in capsys.readouterr().out
    em.run(es)
    names = [es.register[i].reg_name for i in sorted(es.regs_modified)]
    assert "R1" in names
    assert "R0" not in names

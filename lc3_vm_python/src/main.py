# main.py

import sys
import argparse

import common
import objfile
import emulator as em
from console import BufferConsole, TerminalConsole

# Process exit statuses

EXIT_HALTED = 0
EXIT_FATAL = 1
EXIT_NO_PROGRAM = 2
EXIT_INTERRUPTED = 130

def load_program(file_path):
    try:
        return objfile.load_object_file(file_path)
    except FileNotFoundError:
        common.indicate_error(f"Error: File not found at {file_path}")
    except OSError as e:
        common.indicate_error(f"Error: cannot read {file_path}: {e}")
    except common.ObjectFileError as e:
        common.indicate_error(f"Error: invalid object file {file_path}: {e}")
    return None

def run_machine(es, max_instructions=None):
    try:
        em.run(es, max_instructions)
    except common.MissingProgram as e:
        common.indicate_error(f"Error: {e}")
        return EXIT_NO_PROGRAM
    except common.UnimplementedTrap as e:
        common.indicate_error(f"Fatal: {e}")
        return EXIT_FATAL
    except common.InputExhausted as e:
        common.indicate_error(f"Fatal: {e} at x{es.cur_instr_addr:04x}")
        return EXIT_FATAL
    except KeyboardInterrupt:
        common.mode.errlog("Interrupted")
        return EXIT_INTERRUPTED
    if em.is_running(es):
        common.mode.errlog(f"Emulator stopped after {max_instructions} instructions (limit reached).")
    return EXIT_HALTED

def positive_int(text):
    try:
        n = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text}")
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {n}")
    return n

def run_file(file_path, dump_mem=False, dump_regs=False, verbose=False,
             max_instructions=None, input_text=None):
    if verbose:
        common.mode.set_trace()
    image = load_program(file_path)

    if input_text is None:
        with TerminalConsole() as console:
            es = em.EmulatorState(console)
            if image is not None:
                em.boot(es, image)
            status = run_machine(es, max_instructions)
    else:
        console = BufferConsole(input_text)
        es = em.EmulatorState(console)
        if image is not None:
            em.boot(es, image)
        status = run_machine(es, max_instructions)
        sys.stdout.write(console.get_output())
        sys.stdout.flush()

    if dump_regs:
        em.dump_registers(es)
        em.dump_modified_registers_summary(es)
    if dump_mem:
        em.dump_accessed_memory_summary(es)
    return status

def main(argv=None):
    parser = argparse.ArgumentParser(description="LC-3 virtual machine")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Run command
    run_parser = subparsers.add_parser("run", help="Load and run an LC-3 object file")
    run_parser.add_argument("file", help="Path to the object file (.obj)")
    run_parser.add_argument("--mem-dump", action="store_true", help="Dump accessed memory after execution")
    run_parser.add_argument("--reg-dump", action="store_true", help="Dump registers after execution")
    run_parser.add_argument("--verbose", action="store_true", help="Trace every instruction on stderr")
    run_parser.add_argument("--max-instructions", type=positive_int, default=None,
                            help="Stop after this many instructions")
    run_parser.add_argument("--input", default=None,
                            help="Use this text as keyboard input instead of the terminal")

    # GUI command
    gui_parser = subparsers.add_parser("gui", help="Open the graphical front end")
    gui_parser.add_argument("file", nargs="?", default=None, help="Object file to open")

    args = parser.parse_args(argv)

    if args.command == "run":
        status = run_file(args.file, args.mem_dump, args.reg_dump, args.verbose,
                          args.max_instructions, args.input)
        common.mode.clear_trace()
        return status
    elif args.command == "gui":
        import gui
        return gui.start_gui(args.file)
    else:
        parser.print_help()
        return 0

if __name__ == "__main__":
    sys.exit(main())

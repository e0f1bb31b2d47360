import sys
import queue
from PySide6.QtCore import Qt, QObject, Signal, QThread, QMutex, QWaitCondition
from PySide6.QtGui import QFont, QAction, QIcon, QTextCursor
from PySide6.QtWidgets import (
    QApplication, QMainWindow, QPlainTextEdit, QVBoxLayout,
    QTableView, QHeaderView, QSplitter, QGroupBox, QFileDialog, QToolBar
)
from PySide6.QtGui import QStandardItemModel, QStandardItem

import common
import emulator
import objfile
import architecture as arch
import arithmetic as arith
from console import Console
from machine_view import MachineView

# ----------------------------------------------------------------------
# Console attached to the console pane
# ----------------------------------------------------------------------

class ConsoleSignals(QObject):
    output = Signal(str)

# Keys typed into the console pane are queued here by the GUI thread
# and taken by the worker thread; GETC blocks the worker, never the GUI.

class GuiConsole(Console):
    def __init__(self):
        self.keys = queue.Queue()
        self.signals = ConsoleSignals()

    def provide_key(self, code):
        self.keys.put(code & 0xFF)

    # Wake a worker blocked in read_char so its thread can finish
    def interrupt(self):
        self.keys.put(None)

    def clear(self):
        while not self.keys.empty():
            self.keys.get_nowait()

    def read_char(self):
        c = self.keys.get()
        if c is None:
            raise common.InputExhausted()
        return c

    def key_ready(self):
        return not self.keys.empty()

    def write_char(self, code):
        self.signals.output.emit(chr(code & 0xFF))

class ConsoleView(QPlainTextEdit):
    def __init__(self, console, parent=None):
        super().__init__(parent)
        self.console = console
        self.setFont(QFont("Courier New", 10))
        self.setUndoRedoEnabled(False)
        console.signals.output.connect(self.append_output)

    def keyPressEvent(self, event):
        text = event.text()
        if text:
            code = ord(text[0])
            self.console.provide_key(0x0A if code == 0x0D else code)

    def append_output(self, text):
        self.moveCursor(QTextCursor.MoveOperation.End)
        self.insertPlainText(text)
        self.ensureCursorVisible()

# ----------------------------------------------------------------------
# Register and memory tables
# ----------------------------------------------------------------------

class RegisterModel(QStandardItemModel):
    def __init__(self, emulator_state):
        super().__init__(arch.n_gen_registers + 5, 2)
        self.es = emulator_state
        self.setHorizontalHeaderLabels(["Register", "Value"])
        self.previous_values = {} # To store previous register values for highlighting

    def rows(self):
        es = self.es
        rows = [(reg.reg_name, f"x{arith.word_to_hex4(reg.peek())}") for reg in es.regfile]
        rows.append(("PC", f"x{arith.word_to_hex4(es.pc.peek())}"))
        rows.append(("IR", f"x{arith.word_to_hex4(es.ir.peek())}"))
        rows.append(("COND", arch.show_cc(es.cond.peek())))
        rows.append(("Status", es.ab.show_scb_status(es)))
        rows.append(("Count", str(es.ab.read_instr_count(es))))
        return rows

    def update(self):
        for i, (reg_name, value) in enumerate(self.rows()):
            current_item = QStandardItem(reg_name)
            value_item = QStandardItem(value)

            if reg_name in self.previous_values and self.previous_values[reg_name] != value:
                value_item.setBackground(Qt.GlobalColor.yellow) # Highlight changed registers

            self.setItem(i, 0, current_item)
            self.setItem(i, 1, value_item)
            self.previous_values[reg_name] = value

# The memory table shows the 256 word page containing the PC

class MemoryModel(QStandardItemModel):
    def __init__(self, emulator_state):
        super().__init__(16, 17)
        self.es = emulator_state
        header_labels = ["Address"] + [f"+{i:X}" for i in range(16)]
        self.setHorizontalHeaderLabels(header_labels)

    def update(self):
        pc = self.es.pc.peek()
        page = pc & 0xFF00
        for row in range(16):
            address = page + row * 16
            self.setItem(row, 0, QStandardItem(f"x{arith.word_to_hex4(address)}"))
            for col in range(16):
                value = self.es.ab.read_mem16(self.es, address + col)
                item = QStandardItem(arith.word_to_hex4(value))
                if address + col == pc:
                    item.setBackground(Qt.GlobalColor.darkYellow)
                self.setItem(row, col + 1, item)

# ----------------------------------------------------------------------
# Worker thread
# ----------------------------------------------------------------------

class EmulatorWorker(QObject):
    instruction_executed = Signal()
    execution_finished = Signal(str)
    execution_paused = Signal() # Emitted after a single step

    slice_size = 2000 # instructions between display refreshes

    def __init__(self, emulator_state):
        super().__init__()
        self.es = emulator_state
        self._action = None
        self._quit_requested = False
        self._mutex = QMutex()
        self._wait_condition = QWaitCondition()

    def _set_action(self, action):
        self._mutex.lock()
        try:
            self._action = action
            self._wait_condition.wakeAll()
        finally:
            self._mutex.unlock()

    # The mutex only guards the request flags; instructions execute
    # with it released so a blocking read cannot lock out the GUI.

    def run(self):
        while True:
            self._mutex.lock()
            try:
                while self._action is None and not self._quit_requested:
                    self._wait_condition.wait(self._mutex)
                action = self._action
                if action == "step":
                    self._action = None
                quit_requested = self._quit_requested
            finally:
                self._mutex.unlock()

            if quit_requested:
                break

            try:
                if action == "step":
                    emulator.step(self.es)
                else:
                    emulator.run(self.es, self.slice_size)
            except common.EmulatorError as e:
                self._set_action(None)
                if not self._quit_requested:
                    self.execution_finished.emit(f"Error: {e}")
                continue

            if not emulator.is_running(self.es):
                self._set_action(None)
                self.execution_finished.emit("Execution halted.")
            elif action == "step":
                self.execution_paused.emit()
            else:
                self.instruction_executed.emit()

    def start_continuous(self):
        self._set_action("continuous")

    def start_step(self):
        self._set_action("step")

    def pause(self):
        self._set_action(None)

    def quit(self):
        self._mutex.lock()
        try:
            self._quit_requested = True
            self._action = None
            self._wait_condition.wakeAll()
        finally:
            self._mutex.unlock()

# ----------------------------------------------------------------------
# Main window
# ----------------------------------------------------------------------

class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("LC-3 VM")
        self.setGeometry(100, 100, 1300, 850)

        self.console = GuiConsole()
        self.es = emulator.EmulatorState(self.console)
        self.image = None # Memory image of the open object file
        self.current_file = None
        self.finished = False

        main_splitter = QSplitter(Qt.Orientation.Horizontal)
        self.setCentralWidget(main_splitter)

        # Console (left pane)
        io_group = QGroupBox("Console")
        io_layout = QVBoxLayout(io_group)
        self.console_view = ConsoleView(self.console)
        io_layout.addWidget(self.console_view)
        main_splitter.addWidget(io_group)

        right_splitter = QSplitter(Qt.Orientation.Vertical)
        main_splitter.addWidget(right_splitter)

        reg_mem_splitter = QSplitter(Qt.Orientation.Horizontal)

        # Registers view
        reg_group = QGroupBox("Registers")
        reg_layout = QVBoxLayout(reg_group)
        self.reg_view = QTableView()
        self.reg_model = RegisterModel(self.es)
        self.reg_view.setModel(self.reg_model)
        self.reg_view.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        reg_layout.addWidget(self.reg_view)
        reg_mem_splitter.addWidget(reg_group)

        # Memory view
        mem_group = QGroupBox("Memory")
        mem_layout = QVBoxLayout(mem_group)
        self.mem_view = QTableView()
        self.mem_model = MemoryModel(self.es)
        self.mem_view.setModel(self.mem_model)
        self.mem_view.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeToContents)
        mem_layout.addWidget(self.mem_view)
        reg_mem_splitter.addWidget(mem_group)

        reg_mem_splitter.setStretchFactor(0, 1)
        reg_mem_splitter.setStretchFactor(1, 3)
        right_splitter.addWidget(reg_mem_splitter)

        # Machine View
        self.machine_view = MachineView(self.es)
        right_splitter.addWidget(self.machine_view)

        right_splitter.setStretchFactor(0, 1)
        right_splitter.setStretchFactor(1, 1)
        main_splitter.setStretchFactor(0, 1)
        main_splitter.setStretchFactor(1, 2)

        # Toolbar
        self.toolbar = QToolBar("Main Toolbar")
        self.addToolBar(self.toolbar)

        open_action = QAction(QIcon.fromTheme("document-open"), "Open...", self)
        open_action.triggered.connect(self.open_file)
        self.toolbar.addAction(open_action)

        self.run_action = QAction(QIcon.fromTheme("media-playback-start"), "Run", self)
        self.run_action.triggered.connect(self.run_code)
        self.toolbar.addAction(self.run_action)

        self.pause_action = QAction(QIcon.fromTheme("media-playback-pause"), "Pause", self)
        self.pause_action.triggered.connect(self.pause_execution)
        self.pause_action.setEnabled(False)
        self.toolbar.addAction(self.pause_action)

        self.step_action = QAction(QIcon.fromTheme("media-skip-forward"), "Step", self)
        self.step_action.triggered.connect(self.step_code)
        self.toolbar.addAction(self.step_action)

        self.reset_action = QAction(QIcon.fromTheme("view-refresh"), "Reset", self)
        self.reset_action.triggered.connect(self.reset_emulator)
        self.toolbar.addAction(self.reset_action)

        file_menu = self.menuBar().addMenu("&File")
        file_menu.addAction(open_action)

        self.emulator_thread = None
        self.emulator_worker = None
        self._start_worker()
        self.update_views()

    def _start_worker(self):
        self.emulator_thread = QThread()
        self.emulator_worker = EmulatorWorker(self.es)
        self.emulator_worker.moveToThread(self.emulator_thread)
        self.emulator_thread.started.connect(self.emulator_worker.run)
        self.emulator_worker.instruction_executed.connect(self.update_views)
        self.emulator_worker.execution_finished.connect(self.on_execution_finished)
        self.emulator_worker.execution_paused.connect(self.on_execution_paused)
        self.emulator_thread.start()

    def _stop_worker(self):
        self.emulator_worker.quit()
        self.console.interrupt()
        self.emulator_thread.quit()
        self.emulator_thread.wait()
        self.console.clear()

    def _set_running_actions(self, running):
        self.run_action.setEnabled(not running)
        self.pause_action.setEnabled(running)
        self.step_action.setEnabled(not running)

    def message(self, text):
        self.console_view.append_output(f"\n[{text}]\n")

    def update_views(self):
        self.reg_model.update()
        self.mem_model.update()
        self.machine_view.update_view()

    def open_path(self, file_name):
        try:
            self.image = objfile.load_object_file(file_name)
        except (OSError, common.ObjectFileError) as e:
            self.message(f"Error opening file: {e}")
            return False
        self.current_file = file_name
        self.setWindowTitle(f"LC-3 VM - {file_name}")
        self.reset_emulator()
        self.message(f"File loaded: {self.current_file}")
        return True

    def open_file(self):
        file_name, _ = QFileDialog.getOpenFileName(self, "Open Object File", ".", "Object Files (*.obj);;All Files (*)")
        if file_name:
            self.open_path(file_name)

    # After a halt or an error the next Run or Step starts the program
    # again from its loaded image.

    def _restart_if_finished(self):
        if self.image is None:
            self.message("No program loaded")
            return False
        if self.finished:
            emulator.boot(self.es, self.image)
            self.finished = False
        return True

    def run_code(self):
        if not self._restart_if_finished():
            return
        self._set_running_actions(True)
        self.emulator_worker.start_continuous()

    def pause_execution(self):
        self.emulator_worker.pause()
        self._set_running_actions(False)
        self.message("Execution paused.")
        self.update_views()

    def step_code(self):
        if not self._restart_if_finished():
            return
        self.run_action.setEnabled(False)
        self.step_action.setEnabled(False)
        self.emulator_worker.start_step()

    def on_execution_finished(self, message):
        self.finished = True
        self.message(message)
        self.update_views()
        self._set_running_actions(False)

    def on_execution_paused(self):
        self.update_views()
        self._set_running_actions(False)

    def reset_emulator(self):
        self._stop_worker()
        if self.image is not None:
            emulator.boot(self.es, self.image)
        else:
            emulator.reset(self.es)
        self.finished = False
        self._start_worker()
        self.console_view.clear()
        self.update_views()
        self._set_running_actions(False)

    def closeEvent(self, event):
        self._stop_worker()
        super().closeEvent(event)

def start_gui(file_path=None):
    app = QApplication(sys.argv)
    app.setStyleSheet("""
    QMainWindow {
        background-color: #1a1a1a;
        color: #e0e0e0;
    }
    QPlainTextEdit {
        background-color: #2a2a2a;
        color: #00ff00;
        border: 1px solid #007acc;
        padding: 5px;
        font-family: "Consolas", "Monaco", "Courier New", monospace;
        font-size: 10pt;
    }
    QTableView {
        background-color: #2a2a2a;
        color: #e0e0e0;
        border: 1px solid #007acc;
        gridline-color: #444444;
        selection-background-color: #007acc;
        selection-color: #ffffff;
    }
    QHeaderView::section {
        background-color: #3a3a3a;
        color: #e0e0e0;
        padding: 4px;
        border: 1px solid #007acc;
        font-weight: bold;
    }
    QGroupBox {
        background-color: #1a1a1a;
        color: #e0e0e0;
        border: 1px solid #007acc;
        border-radius: 4px;
        margin-top: 10px;
    }
    QGroupBox::title {
        subcontrol-origin: margin;
        subcontrol-position: top left;
        padding: 0 3px;
        color: #00ff00;
        font-weight: bold;
    }
    QMenuBar {
        background-color: #2a2a2a;
        color: #e0e0e0;
    }
    QMenuBar::item:selected {
        background-color: #007acc;
    }
    QToolBar {
        background-color: #2a2a2a;
        border: none;
        padding: 5px;
    }
    QToolButton {
        background-color: transparent;
        border: none;
        padding: 5px;
        color: #e0e0e0;
    }
    QToolButton:hover {
        background-color: #005f99;
        border-radius: 3px;
    }
    """)
    window = MainWindow()
    if file_path:
        window.open_path(file_path)
    window.show()
    return app.exec()

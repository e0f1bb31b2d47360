from PySide6.QtWidgets import QWidget
from PySide6.QtGui import QPainter, QColor, QFont, QPen
from PySide6.QtCore import Qt, QRect

import architecture as arch
import arithmetic as arith

class MachineView(QWidget):
    def __init__(self, emulator_state, parent=None):
        super().__init__(parent)
        self.es = emulator_state
        self.setMinimumSize(640, 420)
        self.previous_reg_values = {} # Register values at the previous repaint

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)

        background_color = QColor("#1a1a1a")
        component_fill_color = QColor("#2a2a2a")
        component_border_color = QColor("#007acc")
        text_color = QColor("#e0e0e0")
        value_color = QColor("#00ff00") # Green for dynamic values
        bus_color = QColor("#ff8c00") # Orange for buses
        highlight_color = QColor("#ffff00") # Yellow for changed values

        painter.fillRect(self.rect(), background_color)

        painter.setPen(QPen(component_border_color, 2))
        painter.setFont(QFont("Arial", 10))

        # --- CPU Block ---
        cpu_rect = QRect(self.width() // 2 - 130, 30, 260, 150)
        painter.fillRect(cpu_rect, component_fill_color)
        painter.drawRect(cpu_rect)
        painter.setPen(text_color)
        painter.setFont(QFont("Arial", 16, QFont.Bold))
        painter.drawText(cpu_rect.adjusted(0, 0, 0, -cpu_rect.height() + 30), Qt.AlignCenter, "CPU")

        painter.setFont(QFont("Arial", 10))
        painter.setPen(QPen(component_border_color, 1))

        alu_rect = QRect(cpu_rect.x() + 15, cpu_rect.y() + 50, 105, 60)
        painter.fillRect(alu_rect, QColor("#3a3a3a"))
        painter.drawRect(alu_rect)
        painter.setPen(text_color)
        painter.drawText(alu_rect, Qt.AlignCenter, "ALU")

        painter.setPen(QPen(component_border_color, 1))
        control_unit_rect = QRect(cpu_rect.x() + 140, cpu_rect.y() + 50, 105, 60)
        painter.fillRect(control_unit_rect, QColor("#3a3a3a"))
        painter.drawRect(control_unit_rect)
        painter.setPen(text_color)
        opname = arch.mnemonic[self.es.ir_op].upper() if self.es else ""
        painter.drawText(control_unit_rect, Qt.AlignCenter, f"Control\n{opname}")

        # --- General Purpose Registers (R0-R7) ---
        painter.setPen(QPen(component_border_color, 2))
        gpr_rect = QRect(30, cpu_rect.y(), 130, 160)
        painter.fillRect(gpr_rect, component_fill_color)
        painter.drawRect(gpr_rect)
        painter.setPen(text_color)
        painter.setFont(QFont("Arial", 12, QFont.Bold))
        painter.drawText(gpr_rect.adjusted(0, 0, 0, -gpr_rect.height() + 20), Qt.AlignCenter, "GPRs")

        painter.setFont(QFont("Courier New", 9))
        reg_y_offset = gpr_rect.y() + 40
        reg_height = 15
        for i in range(arch.n_gen_registers):
            reg_name = f"R{i}"
            value = self.es.regfile[i].peek() if self.es else 0x0000

            if reg_name in self.previous_reg_values and self.previous_reg_values[reg_name] != value:
                painter.setPen(QPen(highlight_color, 1))
            else:
                painter.setPen(text_color)

            painter.drawText(gpr_rect.x() + 8, reg_y_offset + i * reg_height, f"{reg_name}: x{arith.word_to_hex4(value)}")
            self.previous_reg_values[reg_name] = value

        # --- Control Registers ---
        painter.setPen(QPen(component_border_color, 2))
        cr_rect = QRect(cpu_rect.x(), cpu_rect.bottom() + 30, cpu_rect.width(), 110)
        painter.fillRect(cr_rect, component_fill_color)
        painter.drawRect(cr_rect)
        painter.setPen(text_color)
        painter.setFont(QFont("Arial", 12, QFont.Bold))
        painter.drawText(cr_rect.adjusted(0, 0, 0, -cr_rect.height() + 20), Qt.AlignCenter, "Control Registers")

        painter.setFont(QFont("Courier New", 9))
        cr_y_offset = cr_rect.y() + 40
        cr_x_offset = cr_rect.x() + 10
        cr_line_height = 15

        pc_value = self.es.pc.peek() if self.es else 0x0000
        ir_value = self.es.ir.peek() if self.es else 0x0000
        cc_value = self.es.cond.peek() if self.es else 0x0000
        status = self.es.ab.show_scb_status(self.es) if self.es else ""
        painter.setPen(value_color)
        painter.drawText(cr_x_offset, cr_y_offset, f"PC: x{arith.word_to_hex4(pc_value)}")
        painter.drawText(cr_x_offset, cr_y_offset + cr_line_height, f"IR: x{arith.word_to_hex4(ir_value)}")
        painter.drawText(cr_x_offset, cr_y_offset + 2 * cr_line_height, f"CC: {arch.show_cc(cc_value)}")
        painter.drawText(cr_x_offset + 130, cr_y_offset, f"{status}")

        # --- Memory Block ---
        painter.setPen(QPen(component_border_color, 2))
        mem_rect = QRect(self.width() - 170, cpu_rect.y(), 140, 160)
        painter.fillRect(mem_rect, component_fill_color)
        painter.drawRect(mem_rect)
        painter.setPen(text_color)
        painter.setFont(QFont("Arial", 12, QFont.Bold))
        painter.drawText(mem_rect.adjusted(0, 0, 0, -mem_rect.height() + 20), Qt.AlignCenter, "Memory")

        painter.setFont(QFont("Courier New", 8))
        mem_y_offset = mem_rect.y() + 40
        mem_x_offset = mem_rect.x() + 8
        mem_line_height = 13
        for i in range(8): # The words starting at the PC
            addr = arith.limit16(pc_value + i)
            value = self.es.ab.read_mem16(self.es, addr) if self.es else 0x0000
            painter.setPen(highlight_color if i == 0 else value_color)
            painter.drawText(mem_x_offset, mem_y_offset + i * mem_line_height,
                             f"x{arith.word_to_hex4(addr)}: x{arith.word_to_hex4(value)}")

        # --- Keyboard device registers ---
        painter.setPen(QPen(component_border_color, 2))
        dev_rect = QRect(mem_rect.x(), cr_rect.y(), mem_rect.width(), 60)
        painter.fillRect(dev_rect, component_fill_color)
        painter.drawRect(dev_rect)
        painter.setPen(value_color)
        kbsr = self.es.ab.read_mem16(self.es, arch.kbsr_addr) if self.es else 0x0000
        kbdr = self.es.ab.read_mem16(self.es, arch.kbdr_addr) if self.es else 0x0000
        painter.drawText(dev_rect.x() + 8, dev_rect.y() + 22, f"KBSR: x{arith.word_to_hex4(kbsr)}")
        painter.drawText(dev_rect.x() + 8, dev_rect.y() + 40, f"KBDR: x{arith.word_to_hex4(kbdr)}")

        # --- Buses ---
        painter.setPen(QPen(bus_color, 2, Qt.DotLine))
        painter.drawLine(cpu_rect.left(), cpu_rect.center().y(), gpr_rect.right(), cpu_rect.center().y())
        painter.drawLine(cpu_rect.center().x(), cpu_rect.bottom(), cr_rect.center().x(), cr_rect.top())
        painter.drawLine(cpu_rect.right(), cpu_rect.center().y(), mem_rect.left(), cpu_rect.center().y())
        painter.drawLine(mem_rect.center().x(), mem_rect.bottom(), dev_rect.center().x(), dev_rect.top())

        painter.end()

    def update_view(self):
        self.update() # Schedules a paintEvent call

"""
Code Preview Dialog.

Read-only view of the generated Tkinter script with Python syntax
highlighting, line numbers, and copy/save actions. Lines drawing the
selected shape are highlighted.
"""

import logging
from typing import List, Optional, Sequence

from PyQt6.QtCore import Qt, QRegularExpression, QSize
from PyQt6.QtGui import (
    QFont, QColor, QTextCharFormat, QSyntaxHighlighter, QTextCursor,
    QTextDocument, QKeySequence, QShortcut, QPainter, QGuiApplication,
)
from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QPushButton, QPlainTextEdit, QLabel,
    QWidget, QTextEdit, QFileDialog, QMessageBox,
)

from services.tkinter_generator import CodeLine

logger = logging.getLogger(__name__)


class PythonHighlighter(QSyntaxHighlighter):
    """Syntax highlighter for generated Tkinter code."""

    def __init__(self, document: QTextDocument):
        super().__init__(document)
        self._highlighting_rules = []

        keyword_format = QTextCharFormat()
        keyword_format.setForeground(QColor("#CF222E"))  # Red
        keyword_format.setFontWeight(QFont.Weight.Bold)
        for word in ("from", "import", "as", "True", "False", "None"):
            pattern = QRegularExpression(rf"\b{word}\b")
            self._highlighting_rules.append((pattern, keyword_format))

        # Tk classes and canvas item calls
        tk_format = QTextCharFormat()
        tk_format.setForeground(QColor("#0550AE"))  # Blue
        tk_format.setFontWeight(QFont.Weight.Bold)
        for word in ("Tk", "Canvas", "Image", "ImageTk", "PhotoImage", "mainloop"):
            pattern = QRegularExpression(rf"\b{word}\b")
            self._highlighting_rules.append((pattern, tk_format))
        pattern = QRegularExpression(r"\bcreate_[a-z]+\b")
        self._highlighting_rules.append((pattern, tk_format))

        # Keyword arguments
        option_format = QTextCharFormat()
        option_format.setForeground(QColor("#8250DF"))  # Purple
        pattern = QRegularExpression(r"\b[a-z_]+(?==)")
        self._highlighting_rules.append((pattern, option_format))

        number_format = QTextCharFormat()
        number_format.setForeground(QColor("#0550AE"))
        pattern = QRegularExpression(r"-?\b[0-9]+\.?[0-9]*\b")
        self._highlighting_rules.append((pattern, number_format))

        string_format = QTextCharFormat()
        string_format.setForeground(QColor("#0A3069"))  # Dark blue
        self._highlighting_rules.append((QRegularExpression(r'"[^"\\]*(\\.[^"\\]*)*"'), string_format))
        self._highlighting_rules.append((QRegularExpression(r"'[^'\\]*(\\.[^'\\]*)*'"), string_format))

        # Comments last so they win over everything on the line
        comment_format = QTextCharFormat()
        comment_format.setForeground(QColor("#6E7781"))  # Gray
        comment_format.setFontItalic(True)
        self._highlighting_rules.append((QRegularExpression(r"#[^\n]*"), comment_format))

    def highlightBlock(self, text: str):
        """Apply syntax highlighting to a block of text."""
        for pattern, fmt in self._highlighting_rules:
            match_iterator = pattern.globalMatch(text)
            while match_iterator.hasNext():
                match = match_iterator.next()
                self.setFormat(match.capturedStart(), match.capturedLength(), fmt)


class CodeView(QPlainTextEdit):
    """Read-only code view with line numbers."""

    HIGHLIGHT_COLOR = QColor("#DDF4FF")

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setReadOnly(True)
        self.setLineWrapMode(QPlainTextEdit.LineWrapMode.NoWrap)

        font = QFont("Monospace", 11)
        font.setStyleHint(QFont.StyleHint.Monospace)
        self.setFont(font)

        self._line_number_area = LineNumberArea(self)
        self._highlighter = PythonHighlighter(self.document())

        self.setStyleSheet("""
            QPlainTextEdit {
                background: #FFFFFF;
                color: #24292F;
                border: 1px solid #D0D7DE;
                border-radius: 6px;
                padding: 8px;
            }
        """)

        self.blockCountChanged.connect(self._update_line_number_area_width)
        self.updateRequest.connect(self._update_line_number_area)
        self._update_line_number_area_width(0)

    def line_number_area_width(self) -> int:
        digits = len(str(max(1, self.blockCount())))
        return 10 + self.fontMetrics().horizontalAdvance('9') * digits

    def _update_line_number_area_width(self, _):
        self.setViewportMargins(self.line_number_area_width(), 0, 0, 0)

    def _update_line_number_area(self, rect, dy):
        if dy:
            self._line_number_area.scroll(0, dy)
        else:
            self._line_number_area.update(0, rect.y(), self._line_number_area.width(), rect.height())
        if rect.contains(self.viewport().rect()):
            self._update_line_number_area_width(0)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        cr = self.contentsRect()
        self._line_number_area.setGeometry(cr.left(), cr.top(), self.line_number_area_width(), cr.height())

    def highlight_lines(self, line_numbers: Sequence[int]):
        """Mark whole lines (0-based) and scroll the first into view."""
        selections = []
        for number in line_numbers:
            block = self.document().findBlockByNumber(number)
            if not block.isValid():
                continue
            selection = QTextEdit.ExtraSelection()
            selection.format.setBackground(self.HIGHLIGHT_COLOR)
            selection.format.setProperty(QTextCharFormat.Property.FullWidthSelection, True)
            selection.cursor = QTextCursor(block)
            selections.append(selection)
        self.setExtraSelections(selections)
        if selections:
            self.setTextCursor(selections[0].cursor)
            self.centerCursor()

    def line_number_area_paint_event(self, event):
        painter = QPainter(self._line_number_area)
        painter.fillRect(event.rect(), QColor("#F6F8FA"))

        block = self.firstVisibleBlock()
        block_number = block.blockNumber()
        top = round(self.blockBoundingGeometry(block).translated(self.contentOffset()).top())
        bottom = top + round(self.blockBoundingRect(block).height())

        while block.isValid() and top <= event.rect().bottom():
            if block.isVisible() and bottom >= event.rect().top():
                painter.setPen(QColor("#8C959F"))
                painter.drawText(
                    0, top,
                    self._line_number_area.width() - 5,
                    self.fontMetrics().height(),
                    Qt.AlignmentFlag.AlignRight, str(block_number + 1)
                )
            block = block.next()
            top = bottom
            bottom = top + round(self.blockBoundingRect(block).height())
            block_number += 1


class LineNumberArea(QWidget):
    """Widget displaying line numbers for CodeView."""

    def __init__(self, editor: CodeView):
        super().__init__(editor)
        self._editor = editor

    def sizeHint(self):
        return QSize(self._editor.line_number_area_width(), 0)

    def paintEvent(self, event):
        self._editor.line_number_area_paint_event(event)


class CodePreviewDialog(QDialog):
    """
    Dialog showing the generated Tkinter script.

    Features:
    - Python syntax highlighting
    - Line numbers
    - Highlight of the lines drawing a given shape
    - Copy to clipboard and Save As
    """

    def __init__(self, lines: List[CodeLine], script_name: str = "canvas.py",
                 selected_id: Optional[str] = None, parent=None):
        super().__init__(parent)
        self._lines = lines
        self._code = "\n".join(line.content for line in lines) + "\n"
        self._script_name = script_name

        self.setWindowTitle(f"Tkinter code: {script_name}")
        self.setModal(True)
        self.resize(900, 700)

        self._setup_ui()
        self._view.setPlainText(self._code)
        if selected_id is not None:
            self.highlight_shape(selected_id)

    @property
    def code(self) -> str:
        return self._code

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(12)

        header_layout = QHBoxLayout()
        title_label = QLabel(self._script_name)
        title_label.setStyleSheet("font-size: 16px; font-weight: 600; color: #24292F;")
        header_layout.addWidget(title_label)
        header_layout.addStretch()
        info_label = QLabel("Run with: python " + self._script_name)
        info_label.setStyleSheet("color: #57606A; font-size: 12px;")
        header_layout.addWidget(info_label)
        layout.addLayout(header_layout)

        self._view = CodeView()
        layout.addWidget(self._view, 1)

        button_layout = QHBoxLayout()
        copy_btn = QPushButton("Copy")
        copy_btn.clicked.connect(self._on_copy)
        button_layout.addWidget(copy_btn)

        save_btn = QPushButton("Save As...")
        save_btn.clicked.connect(self._on_save)
        button_layout.addWidget(save_btn)

        button_layout.addStretch()

        close_btn = QPushButton("Close")
        close_btn.setDefault(True)
        close_btn.clicked.connect(self.accept)
        button_layout.addWidget(close_btn)
        layout.addLayout(button_layout)

        QShortcut(QKeySequence("Escape"), self, self.reject)

    def highlight_shape(self, shape_id: str):
        """Highlight the comment and call lines of one shape."""
        numbers = [i for i, line in enumerate(self._lines) if line.shape_id == shape_id]
        self._view.highlight_lines(numbers)

    def _on_copy(self):
        QGuiApplication.clipboard().setText(self._code)

    def _on_save(self):
        path, _ = QFileDialog.getSaveFileName(
            self, "Save Tkinter Script", self._script_name, "Python Files (*.py)")
        if not path:
            return
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(self._code)
            logger.info(f"Saved Tkinter script to {path}")
        except OSError as e:
            logger.error(f"Failed to save script: {e}")
            QMessageBox.critical(self, "Save Failed", f"Could not save the script:\n{e}")

    @staticmethod
    def show_code(lines: List[CodeLine], script_name: str = "canvas.py",
                  selected_id: Optional[str] = None, parent=None):
        """Show the preview dialog modally."""
        dialog = CodePreviewDialog(lines, script_name, selected_id, parent)
        dialog.exec()

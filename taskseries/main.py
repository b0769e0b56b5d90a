from __future__ import annotations

import sys

from PySide6.QtGui import QColor, QFont, QPalette
from PySide6.QtWidgets import QApplication, QMessageBox, QStyleFactory

from taskseries.infra.db import init_db
from taskseries.infra.logging import setup_logging
from taskseries.ui.series_window import SeriesWindow


DARK_PALETTE = {
    QPalette.Window: "#0F172A",
    QPalette.WindowText: "#E6EDF3",
    QPalette.Base: "#111827",
    QPalette.AlternateBase: "#1B2230",
    QPalette.Text: "#E6EDF3",
    QPalette.Button: "#202A3B",
    QPalette.ButtonText: "#E6EDF3",
    QPalette.Highlight: "#2563EB",
    QPalette.HighlightedText: "#FFFFFF",
    QPalette.ToolTipBase: "#1B2230",
    QPalette.ToolTipText: "#E6EDF3",
    QPalette.PlaceholderText: "#64748B",
}


def _apply_palette(app: QApplication, colors: dict) -> None:
    palette = QPalette()
    for role, color in colors.items():
        palette.setColor(role, QColor(color))
    app.setPalette(palette)


def main() -> None:
    setup_logging("desktop")
    app = QApplication(sys.argv)
    try:
        init_db()
    except Exception as exc:  # noqa: BLE001
        QMessageBox.critical(None, "DB error", str(exc))
        return

    app.setStyle(QStyleFactory.create("Fusion"))
    _apply_palette(app, DARK_PALETTE)
    app.setFont(QFont("Bahnschrift", 10))

    window = SeriesWindow()
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()

from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QCheckBox,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from taskseries.config import SETTINGS
from taskseries.domain.datekeys import today_date_key
from taskseries.domain.errors import TaskSeriesError
from taskseries.infra.repository import SqlSeriesStore
from taskseries.services.backfill import BackfillEngine
from taskseries.services.summary import SeriesSummaryBuilder

from .widgets import SeriesItemWidget


class SeriesWindow(QWidget):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Повторювані задачі")
        self.resize(900, 680)

        store = SqlSeriesStore(tz_name=SETTINGS.recurrence_timezone)
        self.summaries = SeriesSummaryBuilder(store)
        self.backfill = BackfillEngine(store, tz_name=SETTINGS.recurrence_timezone)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(12)

        header = QHBoxLayout()
        header_title = QLabel("Повторювані задачі")
        header_title.setProperty("class", "panel-title")
        self.stats_label = QLabel("")
        self.stats_label.setProperty("class", "stats-badge")
        header.addWidget(header_title)
        header.addStretch()
        header.addWidget(self.stats_label)

        action_bar = QFrame()
        action_bar.setObjectName("ActionBar")
        action_layout = QHBoxLayout(action_bar)
        action_layout.setContentsMargins(12, 10, 12, 10)
        action_layout.setSpacing(8)

        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Пошук повторюваних задач")
        self.search_input.setMinimumWidth(220)
        self.search_input.textChanged.connect(self.apply_search)

        self.dry_run_check = QCheckBox("Лише перевірити")

        backfill_button = QPushButton("Дозаповнити")
        backfill_button.clicked.connect(self.run_backfill)

        refresh_button = QPushButton("Оновити")
        refresh_button.setProperty("variant", "secondary")
        refresh_button.clicked.connect(self.refresh_series)

        action_layout.addWidget(self.search_input, 1)
        action_layout.addWidget(self.dry_run_check)
        action_layout.addWidget(backfill_button)
        action_layout.addWidget(refresh_button)

        self.series_list = QListWidget()
        self.series_list.setObjectName("TaskList")
        self.series_list.setSpacing(10)
        self.series_list.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)

        layout.addLayout(header)
        layout.addWidget(action_bar)
        layout.addWidget(self.series_list)

        self.refresh_series()

        QShortcut(QKeySequence("F5"), self, self.refresh_series)

    def refresh_series(self) -> None:
        try:
            summaries = self.summaries.build_all_summaries()
        except TaskSeriesError as exc:
            QMessageBox.critical(self, "Помилка", str(exc))
            return

        self.series_list.clear()
        for summary in summaries:
            item = QListWidgetItem()
            item.setData(Qt.UserRole, summary.series_id)
            self.series_list.addItem(item)
            widget = SeriesItemWidget(summary)
            item.setSizeHint(widget.sizeHint())
            self.series_list.setItemWidget(item, widget)

        open_total = sum(summary.open_instances for summary in summaries)
        self.stats_label.setText(f"Серій: {len(summaries)} | Відкрито: {open_total}")
        self.apply_search()

    def apply_search(self) -> None:
        needle = self.search_input.text().strip().lower()
        for row in range(self.series_list.count()):
            item = self.series_list.item(row)
            widget = self.series_list.itemWidget(item)
            title = widget.summary.title.lower() if widget else ""
            item.setHidden(bool(needle) and needle not in title)

    def run_backfill(self) -> None:
        dry_run = self.dry_run_check.isChecked()
        try:
            report = self.backfill.backfill_all(
                today_date_key(SETTINGS.recurrence_timezone),
                dry_run=dry_run,
            )
        except TaskSeriesError as exc:
            QMessageBox.critical(self, "Помилка", str(exc))
            return

        lines = [
            f"Станом на: {report.as_of_date_key}",
            f"Оброблено серій: {report.series_processed}",
            f"{'Буде створено' if dry_run else 'Створено'} задач: {report.tasks_created}",
        ]
        if report.series_failed:
            lines.append(f"Серій з помилками: {report.series_failed}")
        if report.series_updated:
            lines.append(f"Приєднано старих серій: {report.series_updated}")
        QMessageBox.information(self, "Дозаповнення", "\n".join(lines))
        if not dry_run:
            self.refresh_series()

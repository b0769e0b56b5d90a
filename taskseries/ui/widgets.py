from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QHBoxLayout, QLabel, QSizePolicy, QVBoxLayout, QWidget

from taskseries.domain.entities import SeriesSummary

PATTERN_LABELS = {
    "daily": "днів",
    "weekly": "тижнів",
    "monthly": "місяців",
    "yearly": "років",
}

SINGLE_PATTERN_LABELS = {
    "daily": "Щодня",
    "weekly": "Щотижня",
    "monthly": "Щомісяця",
    "yearly": "Щороку",
}

OPEN_BADGE_COLORS = {
    True: "#2563EB",
    False: "#4B5563",
}


def cadence_label(pattern: str, interval: int) -> str:
    if not pattern:
        return "—"
    if interval > 1:
        return f"Кожні {interval} {PATTERN_LABELS.get(pattern, pattern)}"
    return SINGLE_PATTERN_LABELS.get(pattern, pattern)


def date_key_to_display(date_key: str | None) -> str:
    if not date_key:
        return "—"
    year, month, day = date_key.split("-")
    return f"{day}.{month}.{year}"


class SeriesItemWidget(QWidget):
    def __init__(self, summary: SeriesSummary):
        super().__init__()
        self.summary = summary

        self.setObjectName("TaskCard")
        self.setAttribute(Qt.WA_StyledBackground, True)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)
        self.setMinimumHeight(72)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 8, 12, 8)
        layout.setSpacing(4)

        title_text = summary.title.strip() if summary.title else "Без назви"
        title = QLabel(title_text)
        title.setProperty("class", "task-title")
        title.setWordWrap(True)
        title.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Preferred)

        has_open = summary.open_instances > 0
        badge = QLabel(f"{summary.open_instances} відкрито")
        badge.setProperty("class", "task-priority")
        badge.setStyleSheet(f"background-color: {OPEN_BADGE_COLORS[has_open]};")
        badge.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Fixed)

        header = QHBoxLayout()
        header.setSpacing(8)
        header.addWidget(title, 1)
        header.addWidget(badge, 0, Qt.AlignTop)

        meta_parts = [
            cadence_label(summary.recurring_pattern, summary.recurring_interval),
            f"Останній: {date_key_to_display(summary.last_instance_date_key)}",
            f"Наступний: {date_key_to_display(summary.next_instance_date_key)}",
            f"Виконано: {summary.completed_instances}/{summary.total_instances}",
        ]
        meta = QLabel(" | ".join(meta_parts))
        meta.setProperty("class", "task-meta")
        meta.setWordWrap(True)
        meta.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Preferred)

        layout.addLayout(header)
        layout.addWidget(meta)

"""
Агрегация статистики пользователя из истории сессий

Статистика нигде не хранится: каждый вызов заново проходит по полной
истории из хранилища, поэтому она всегда согласована с записями
"""

import csv
import io
import logging
from collections import Counter
from datetime import date, datetime, timedelta, tzinfo
from typing import Callable, Dict, List, Optional

from speedtrainer.config.settings import COMPREHENSION_BAR, TIMEZONE
from speedtrainer.core.models import ExerciseKind, SessionRecord, SessionSummary, Statistics
from speedtrainer.core.session_store import SessionRecordStore
from speedtrainer.utils.date_helpers import get_timezone, local_date, local_datetime, local_now

logger = logging.getLogger(__name__)

CSV_HEADER = ["Date", "WPM", "Comprehension", "Words Read"]
CSV_DATE_FORMAT = "%Y-%m-%d %H:%M"

# Свободное чтение не считается отдельным упражнением
_TRAINING_KINDS = frozenset({
    ExerciseKind.EXPOSURE,
    ExerciseKind.GRID_SEARCH,
    ExerciseKind.CHUNKED_REVEAL,
})


def _summarize(record: SessionRecord) -> SessionSummary:
    return SessionSummary(
        date=record.completed_at,
        wpm=record.wpm,
        comprehension=record.comprehension_score,
        words_read=record.words_read or 0,
    )


class StatisticsService:
    """
    Считает статистику, графики прогресса и календарь активности

    Args:
        record_store: Хранилище завершённых сессий
        comprehension_bar: Порог понимания для comprehension_count
            (None - счётчик не ведётся)
        tz: Часовой пояс пользователя для границ дней (по умолчанию SPEEDTRAINER_TIMEZONE)
        now_provider: Источник текущего времени
    """

    def __init__(
        self,
        record_store: SessionRecordStore,
        comprehension_bar: Optional[float] = COMPREHENSION_BAR,
        tz: Optional[tzinfo] = None,
        now_provider: Optional[Callable[[], datetime]] = None,
    ):
        self.record_store = record_store
        self.comprehension_bar = comprehension_bar
        self.tz = tz if tz is not None else get_timezone(TIMEZONE)
        self._now = now_provider or (lambda: local_now(self.tz))

    def compute_statistics(self, user_id: str) -> Statistics:
        """
        Пересчитать статистику пользователя по всей истории

        Args:
            user_id: ID пользователя

        Returns:
            Statistics (нули и пустая история, если сессий нет)
        """
        records = self.record_store.list_by_user(user_id)

        speeds = [r.wpm for r in records if r.wpm is not None]
        scores = [r.comprehension_score for r in records if r.comprehension_score is not None]

        comprehension_count = None
        if self.comprehension_bar is not None:
            comprehension_count = sum(1 for score in scores if score >= self.comprehension_bar)

        statistics = Statistics(
            user_id=user_id,
            total_sessions=len(records),
            total_words_read=sum(r.words_read or 0 for r in records),
            total_training_seconds=sum(r.duration_seconds for r in records),
            current_wpm=(records[0].wpm or 0) if records else 0,
            best_wpm=max(speeds, default=0),
            average_comprehension=sum(scores) / len(scores) if scores else 0.0,
            best_comprehension=max(scores, default=0.0),
            session_history=[_summarize(r) for r in records],
            exercise_kinds_completed=len({r.kind for r in records if r.kind in _TRAINING_KINDS}),
            texts_read=len({r.settings.text_id for r in records if r.settings.text_id}),
            categories_read=len({r.settings.text_category for r in records if r.settings.text_category}),
            comprehension_count=comprehension_count,
        )

        logger.debug(
            f"📊 Статистика пользователя {user_id}: сессий={statistics.total_sessions}, "
            f"слов={statistics.total_words_read}, лучший темп={statistics.best_wpm}"
        )
        return statistics

    # ========================================================================
    # ПРОГРЕСС И КАЛЕНДАРЬ
    # ========================================================================

    def get_speed_progress(self, user_id: str, days: Optional[int] = None) -> List[SessionSummary]:
        """
        Сводки сессий за последние days дней, старые первыми (для графика)

        Args:
            user_id: ID пользователя
            days: Размер окна в днях (None - вся история)

        Returns:
            Список SessionSummary
        """
        records = self.record_store.list_by_user(user_id)
        if days is not None:
            cutoff = local_datetime(self._now() - timedelta(days=days), self.tz)
            records = [r for r in records if local_datetime(r.completed_at, self.tz) >= cutoff]

        return [_summarize(r) for r in reversed(records)]

    def get_comprehension_progress(self, user_id: str, days: Optional[int] = None) -> List[SessionSummary]:
        """То же, что get_speed_progress, но только сессии с оценкой понимания"""
        return [s for s in self.get_speed_progress(user_id, days) if s.comprehension is not None]

    def get_activity_calendar(self, user_id: str) -> Dict[date, int]:
        """Количество сессий по календарным дням"""
        counter = Counter(
            local_date(r.completed_at, self.tz)
            for r in self.record_store.list_by_user(user_id)
        )
        return dict(counter)

    def export_statistics(self, user_id: str) -> str:
        """
        Выгрузка истории в CSV

        Returns:
            Текст CSV: заголовок и по строке на сессию, свежие первыми
        """
        statistics = self.compute_statistics(user_id)

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for summary in statistics.session_history:
            writer.writerow([
                summary.date.strftime(CSV_DATE_FORMAT),
                summary.wpm if summary.wpm is not None else "N/A",
                f"{summary.comprehension:.2f}" if summary.comprehension is not None else "N/A",
                summary.words_read,
            ])

        logger.info(f"📤 Экспорт статистики пользователя {user_id}: {statistics.total_sessions} строк")
        return buffer.getvalue()

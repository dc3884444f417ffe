"""
Общая машина состояний для всех упражнений

IDLE -> RUNNING -> (PAUSED <-> RUNNING) -> COMPLETED | CANCELLED

Каждое упражнение держит два таймера: секундомер (раз в секунду) и таймер
темпа (свой интервал у каждого упражнения). На паузе таймеры снимаются с
часов вместе с остатком текущего интервала и после возобновления
досчитывают именно этот остаток, поэтому время паузы не попадает ни в
счётчики, ни в прошедшее время
"""

import logging
import uuid
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

from speedtrainer.config.settings import ELAPSED_TICK_SECONDS
from speedtrainer.core.clock import Clock, TimerHandle
from speedtrainer.core.models import (
    ExerciseEvent,
    ExerciseKind,
    ExerciseResult,
    ExerciseSettings,
    ExerciseState,
)
from speedtrainer.utils.error_handlers import InvalidConfigurationError

logger = logging.getLogger(__name__)

EventListener = Callable[[ExerciseEvent], None]

# Погрешность вычитания float при сравнении с лимитом времени
_EPSILON = 1e-6


class ExerciseSession(ABC):
    """
    Базовый движок упражнения

    Наследники задают темп, правила продвижения и завершения. Сам результат
    отдаётся один раз при переходе в COMPLETED: через событие "completed"
    и свойство result. После отмены результата нет
    """

    kind: ExerciseKind

    def __init__(self, clock: Clock, duration_seconds: Optional[int] = None):
        """
        Args:
            clock: Часы, на которых работают таймеры
            duration_seconds: Лимит времени (None если упражнение без лимита)
        """
        if duration_seconds is not None and duration_seconds <= 0:
            raise InvalidConfigurationError("duration_seconds", duration_seconds, "длительность должна быть положительной")

        self.clock = clock
        self.duration_seconds = duration_seconds
        self.session_id = str(uuid.uuid4())[:8]

        self.state = ExerciseState.IDLE
        self.elapsed_seconds = 0
        self.result: Optional[ExerciseResult] = None

        self._active_accumulated = 0.0
        self._resumed_at: Optional[float] = None
        self._timers: List[TimerHandle] = []
        self._suspended: List[Tuple[float, Callable[[], None], float]] = []
        self._listeners: List[EventListener] = []

    # ========================================================================
    # ТО, ЧТО ЗАДАЮТ НАСЛЕДНИКИ
    # ========================================================================

    @property
    @abstractmethod
    def pacing_interval(self) -> Optional[float]:
        """Интервал таймера темпа в секундах (None если таймер не нужен)"""

    @property
    @abstractmethod
    def display(self) -> str:
        """Что сейчас показать пользователю"""

    @property
    @abstractmethod
    def progress(self) -> float:
        """Прогресс от 0.0 до 1.0"""

    @abstractmethod
    def settings_snapshot(self) -> ExerciseSettings:
        """Настройки для записи в историю"""

    @abstractmethod
    def _reset_counters(self):
        """Обнулить счётчики (при старте и при отмене)"""

    @abstractmethod
    def _build_result(self) -> ExerciseResult:
        """Собрать сырой результат в момент завершения"""

    def _advance(self):
        """Шаг таймера темпа"""

    def _on_start(self):
        """Подготовка контента сразу после перехода в RUNNING"""

    def _has_content(self) -> bool:
        """Есть ли что показывать (на пустом контенте упражнение завершается сразу)"""
        return True

    def _is_finished(self) -> bool:
        """Достигнут ли конец контента после шага темпа"""
        return False

    # ========================================================================
    # ПОДПИСКА НА СОБЫТИЯ
    # ========================================================================

    def add_listener(self, listener: EventListener):
        self._listeners.append(listener)

    def remove_listener(self, listener: EventListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event_type: str, result: Optional[ExerciseResult] = None):
        event = ExerciseEvent(
            type=event_type,
            kind=self.kind,
            state=self.state,
            display=self.display if event_type == "tick" else "",
            progress=max(0.0, min(self.progress, 1.0)),
            elapsed_seconds=self.elapsed_seconds,
            result=result,
        )
        for listener in list(self._listeners):
            listener(event)

    # ========================================================================
    # ПЕРЕХОДЫ СОСТОЯНИЙ
    # ========================================================================

    @property
    def is_running(self) -> bool:
        return self.state == ExerciseState.RUNNING

    @property
    def is_paused(self) -> bool:
        return self.state == ExerciseState.PAUSED

    def start(self) -> bool:
        """
        Запустить упражнение

        Returns:
            True если упражнение запущено (или сразу завершено на пустом контенте)
        """
        if self.state != ExerciseState.IDLE:
            logger.warning(f"⚠️ Сессия {self.session_id}: start() в состоянии {self.state.value}")
            return False

        self._reset_counters()
        self.state = ExerciseState.RUNNING
        self._resumed_at = self.clock.now()

        logger.info(f"▶️ Упражнение {self.kind.value} запущено: сессия={self.session_id}")
        self._on_start()

        if not self._has_content():
            logger.info(f"📭 Сессия {self.session_id}: контента нет, завершаем сразу")
            self._complete()
            return True

        # Таймер темпа создаётся первым: при совпадении времени он срабатывает раньше секундомера
        interval = self.pacing_interval
        if interval is not None:
            self._timers.append(self.clock.schedule_repeating(interval, self._on_pacing_tick))
        self._timers.append(self.clock.schedule_repeating(ELAPSED_TICK_SECONDS, self._on_elapsed_tick))

        self._emit("tick")
        return True

    def pause(self) -> bool:
        if self.state != ExerciseState.RUNNING:
            return False

        now = self.clock.now()
        self._active_accumulated += now - self._resumed_at
        self._resumed_at = None
        self._suspended = [
            (timer.interval, timer.callback, max(timer.next_due - now, 0.0))
            for timer in self._timers
        ]
        self._stop_timers()
        self.state = ExerciseState.PAUSED
        logger.debug(f"⏸️ Сессия {self.session_id} на паузе")
        self._emit("tick")
        return True

    def resume(self) -> bool:
        if self.state != ExerciseState.PAUSED:
            return False

        self._resumed_at = self.clock.now()
        self.state = ExerciseState.RUNNING
        # Порядок прежний: таймер темпа снова раньше секундомера
        for interval, callback, remaining in self._suspended:
            self._timers.append(self.clock.schedule_repeating(interval, callback, first_delay=remaining))
        self._suspended = []
        logger.debug(f"▶️ Сессия {self.session_id} продолжена")
        self._emit("tick")
        return True

    def toggle_pause(self) -> bool:
        if self.is_paused:
            return self.resume()
        return self.pause()

    def cancel(self) -> bool:
        """
        Отменить упражнение: таймеры останавливаются, счётчики сбрасываются,
        результата не будет

        Returns:
            True если отмена произошла
        """
        if self.state.is_terminal:
            return False

        self._stop_timers()
        self._suspended = []
        self.state = ExerciseState.CANCELLED
        self._reset_counters()
        self.elapsed_seconds = 0
        self._active_accumulated = 0.0
        self._resumed_at = None

        logger.info(f"🛑 Сессия {self.session_id} отменена")
        self._emit("cancelled")
        return True

    def active_seconds(self) -> float:
        """Точное активное время по часам движка, без пауз"""
        if self.state == ExerciseState.RUNNING and self._resumed_at is not None:
            return self._active_accumulated + (self.clock.now() - self._resumed_at)
        return self._active_accumulated

    # ========================================================================
    # ТАЙМЕРЫ
    # ========================================================================

    def _on_elapsed_tick(self):
        if self.state != ExerciseState.RUNNING:
            return

        active = self.active_seconds() + _EPSILON
        self.elapsed_seconds = int(active)
        if self.duration_seconds is not None and active >= self.duration_seconds:
            logger.info(f"⏰ Сессия {self.session_id}: время вышло ({self.duration_seconds} сек)")
            self._complete()
            return

        self._emit("tick")

    def _on_pacing_tick(self):
        if self.state != ExerciseState.RUNNING:
            return

        self._advance()
        if self._is_finished():
            logger.info(f"🏁 Сессия {self.session_id}: контент пройден")
            self._complete()
            return

        self._emit("tick")

    def _stop_timers(self):
        for timer in self._timers:
            timer.cancel()
        self._timers.clear()

    def _complete(self):
        if self.state.is_terminal:
            return

        self._stop_timers()
        if self._resumed_at is not None:
            self._active_accumulated += self.clock.now() - self._resumed_at
            self._resumed_at = None

        self.state = ExerciseState.COMPLETED
        self.elapsed_seconds = int(round(self._active_accumulated))
        self.result = self._build_result()

        logger.info(
            f"🎉 Упражнение {self.kind.value} завершено: сессия={self.session_id}, "
            f"время={self.result.elapsed_seconds} сек, слов={self.result.words_read}, ошибок={self.result.mistakes}"
        )
        self._emit("completed", result=self.result)

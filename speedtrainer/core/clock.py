"""
Часы и периодические таймеры для движков упражнений

Движок не знает, откуда берётся время: в приложении это цикл asyncio,
в тестах виртуальные часы, которые двигаются вручную
"""

import asyncio
import heapq
import itertools
import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

TickCallback = Callable[[], None]


class TimerHandle:
    """
    Периодический таймер, который можно отменить

    Первое срабатывание через first_delay секунд после origin (по умолчанию
    через interval), дальше строго через каждые interval
    """

    def __init__(
        self,
        interval: float,
        callback: TickCallback,
        origin: float = 0.0,
        first_delay: Optional[float] = None,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        if first_delay is not None and first_delay < 0:
            raise ValueError("first_delay must not be negative")
        self.interval = interval
        self.callback = callback
        self.origin = origin
        self.first_delay = interval if first_delay is None else first_delay
        self.fired = 0
        self.cancelled = False

    @property
    def next_due(self) -> float:
        # Считаем от точки старта, чтобы не копить ошибку сложения float
        return self.origin + self.first_delay + self.fired * self.interval

    def cancel(self):
        self.cancelled = True


class Clock(ABC):
    """Источник времени и планировщик периодических вызовов"""

    @abstractmethod
    def now(self) -> float:
        """Монотонное время в секундах"""

    @abstractmethod
    def schedule_repeating(
        self,
        interval: float,
        callback: TickCallback,
        first_delay: Optional[float] = None,
    ) -> TimerHandle:
        """
        Вызывать callback каждые interval секунд до отмены

        Args:
            interval: Период в секундах
            callback: Что вызывать
            first_delay: Задержка первого вызова (по умолчанию interval)
        """


# ============================================================================
# ВИРТУАЛЬНЫЕ ЧАСЫ
# ============================================================================

class _VirtualTimer(TimerHandle):

    def __init__(self, interval, callback, origin, first_delay, order: int):
        super().__init__(interval, callback, origin, first_delay)
        self.order = order


class VirtualClock(Clock):
    """
    Часы, которые идут только по команде advance()

    Таймеры срабатывают в порядке времени, при равном времени раньше
    срабатывает таймер, созданный первым
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: List[Tuple[float, int, int, _VirtualTimer]] = []
        self._order = itertools.count()
        self._push_seq = itertools.count()

    def now(self) -> float:
        return self._now

    def schedule_repeating(
        self,
        interval: float,
        callback: TickCallback,
        first_delay: Optional[float] = None,
    ) -> TimerHandle:
        timer = _VirtualTimer(interval, callback, self._now, first_delay, order=next(self._order))
        self._push(timer)
        return timer

    def _push(self, timer: _VirtualTimer):
        heapq.heappush(self._queue, (timer.next_due, timer.order, next(self._push_seq), timer))

    def advance(self, seconds: float):
        """
        Сдвинуть время вперёд, выполнив все таймеры, чей срок наступил

        Args:
            seconds: На сколько секунд сдвинуть часы
        """
        if seconds < 0:
            raise ValueError("cannot move the clock backwards")

        target = self._now + seconds
        while self._queue and self._queue[0][0] <= target:
            due, _, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = due
            timer.fired += 1
            timer.callback()
            if not timer.cancelled:
                self._push(timer)
        self._now = target

    @property
    def pending_timers(self) -> int:
        """Сколько активных таймеров ещё в очереди"""
        return sum(1 for *_, timer in self._queue if not timer.cancelled)


# ============================================================================
# ЧАСЫ НА ЦИКЛЕ ASYNCIO
# ============================================================================

class _AsyncioTimer(TimerHandle):

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        interval: float,
        callback: TickCallback,
        first_delay: Optional[float] = None,
    ):
        super().__init__(interval, callback, loop.time(), first_delay)
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self._schedule_next()

    def _schedule_next(self):
        self._handle = self._loop.call_at(self.next_due, self._fire)

    def _fire(self):
        if self.cancelled:
            return
        self.fired += 1
        self.callback()
        if not self.cancelled:
            self._schedule_next()

    def cancel(self):
        super().cancel()
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class AsyncioClock(Clock):
    """Реальные часы поверх цикла событий asyncio (однопоточно, кооперативно)"""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self._get_loop().time()

    def schedule_repeating(
        self,
        interval: float,
        callback: TickCallback,
        first_delay: Optional[float] = None,
    ) -> TimerHandle:
        logger.debug(f"⏱️ Таймер каждые {interval:.3f} сек")
        return _AsyncioTimer(self._get_loop(), interval, callback, first_delay)

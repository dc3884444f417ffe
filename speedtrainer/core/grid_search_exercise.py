"""
Упражнение GridSearch (таблицы Шульте): найти числа 1..N² по порядку
"""

import logging
import random
from typing import List, Optional

from speedtrainer.config.settings import GRID_SIZES, GRID_ROUNDS
from speedtrainer.core.clock import Clock
from speedtrainer.core.exercise_session import ExerciseSession
from speedtrainer.core.metrics import grid_accuracy
from speedtrainer.core.models import Difficulty, ExerciseKind, ExerciseResult, ExerciseSettings
from speedtrainer.utils.error_handlers import InvalidConfigurationError

logger = logging.getLogger(__name__)

_GRID_DIFFICULTY = {
    5: Difficulty.BEGINNER,
    7: Difficulty.INTERMEDIATE,
}


class GridSearchExercise(ExerciseSession):
    """
    Таблица N×N со случайной перестановкой чисел 1..N²

    Нажатие на клетку с текущей целью сдвигает цель на 1 (или завершает раунд
    на N²), любое другое нажатие считается ошибкой и больше ничего не меняет.
    Каждый раунд начинается с заново перемешанной таблицы, время раунда
    считается по часам движка без пауз
    """

    kind = ExerciseKind.GRID_SEARCH

    def __init__(
        self,
        clock: Clock,
        grid_size: int = 5,
        rounds: int = 1,
        rng: Optional[random.Random] = None,
    ):
        if grid_size not in GRID_SIZES:
            raise InvalidConfigurationError(
                "grid_size", grid_size, f"допустимо {', '.join(map(str, GRID_SIZES))}"
            )
        if rounds not in GRID_ROUNDS:
            raise InvalidConfigurationError(
                "rounds", rounds, f"допустимо {', '.join(map(str, GRID_ROUNDS))}"
            )

        super().__init__(clock, duration_seconds=None)

        self.grid_size = grid_size
        self.rounds = rounds
        self._rng = rng or random.Random()

        self.grid: List[int] = []
        self.current_target = 1
        self.current_round = 1
        self.mistakes = 0
        self.round_durations: List[float] = []
        self._round_started_at = 0.0

        logger.info(f"✅ GridSearchExercise создано: таблица {grid_size}x{grid_size}, раундов={rounds}")

    @property
    def total_cells(self) -> int:
        return self.grid_size * self.grid_size

    @property
    def pacing_interval(self) -> None:
        return None

    @property
    def display(self) -> str:
        return str(self.current_target)

    @property
    def progress(self) -> float:
        done = len(self.round_durations) + (self.current_target - 1) / self.total_cells
        return done / self.rounds

    @property
    def accuracy(self) -> float:
        return grid_accuracy(self.grid_size, max(len(self.round_durations), 1), self.mistakes)

    def settings_snapshot(self) -> ExerciseSettings:
        return ExerciseSettings(
            grid_size=self.grid_size,
            rounds=self.rounds,
            difficulty=_GRID_DIFFICULTY.get(self.grid_size),
        )

    def cell_at(self, row: int, col: int) -> int:
        """Число в клетке (row, col)"""
        return self.grid[row * self.grid_size + col]

    def index_of(self, value: int) -> int:
        """Индекс клетки с числом value"""
        return self.grid.index(value)

    def tap(self, cell_index: int) -> bool:
        """
        Нажатие на клетку

        Args:
            cell_index: Индекс клетки в таблице (построчно, с нуля)

        Returns:
            True если нажата текущая цель
        """
        if not self.is_running:
            logger.debug(f"⚠️ Нажатие в состоянии {self.state.value} проигнорировано")
            return False
        if not 0 <= cell_index < len(self.grid):
            logger.warning(f"⚠️ Нажатие вне таблицы: {cell_index}")
            return False

        value = self.grid[cell_index]
        if value != self.current_target:
            self.mistakes += 1
            logger.debug(f"❌ Ошибка: нажато {value}, ожидалось {self.current_target} (ошибок: {self.mistakes})")
            self._emit("tick")
            return False

        if self.current_target == self.total_cells:
            self._finish_round()
        else:
            self.current_target += 1
            self._emit("tick")
        return True

    # ========================================================================
    # РАУНДЫ
    # ========================================================================

    def _on_start(self):
        self._start_round()

    def _start_round(self):
        numbers = list(range(1, self.total_cells + 1))
        self._rng.shuffle(numbers)
        self.grid = numbers
        self.current_target = 1
        self._round_started_at = self.active_seconds()

    def _finish_round(self):
        duration = self.active_seconds() - self._round_started_at
        self.round_durations.append(duration)
        logger.info(f"✨ Раунд {self.current_round}/{self.rounds} пройден за {duration:.1f} сек")

        if len(self.round_durations) >= self.rounds:
            self._complete()
            return

        self.current_round += 1
        self._start_round()
        self._emit("tick")

    def _reset_counters(self):
        self.grid = []
        self.current_target = 1
        self.current_round = 1
        self.mistakes = 0
        self.round_durations = []
        self._round_started_at = 0.0

    def _build_result(self) -> ExerciseResult:
        return ExerciseResult(
            kind=self.kind,
            elapsed_seconds=self.elapsed_seconds,
            active_seconds=self.active_seconds(),
            units_covered=len(self.round_durations),
            total_units=self.rounds,
            mistakes=self.mistakes,
            round_durations=list(self.round_durations),
            settings=self.settings_snapshot(),
        )

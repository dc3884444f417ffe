"""Ядро тренажёра скорочтения: упражнения, статистика, серии и достижения"""

__version__ = "1.0.0"

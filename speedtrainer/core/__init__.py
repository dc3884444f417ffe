"""Бизнес-логика: движки упражнений, метрики, статистика, серии, достижения"""

"""Конфигурация тренажёра"""

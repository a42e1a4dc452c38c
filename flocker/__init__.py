"""Flocker: терминальный менеджер контейнеров Fluree."""

__version__ = "0.4.0"

"""Вспомогательные утилиты Flocker."""

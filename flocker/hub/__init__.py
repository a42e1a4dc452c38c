"""Доступ к Docker Hub: теги образа Fluree."""

from .api import HubClient
from .exceptions import HubAPIError
from .tag import Tag

__all__ = ["HubAPIError", "HubClient", "Tag"]

"""Клиент Docker Hub: список тегов репозитория с постраничной загрузкой."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from flocker.hub.exceptions import HubAPIError
from flocker.hub.tag import Tag
from flocker.settings.registry import SettingsRegistry

LOGGER = logging.getLogger(__name__)


class HubClient:
    """Загружает все теги, проходя по ссылкам ``next`` ответа Docker Hub."""

    def __init__(
        self,
        tags_url: str,
        *,
        page_size: int = 100,
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._tags_url = tags_url
        self._page_size = page_size
        self._timeout = timeout
        self._session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: SettingsRegistry) -> "HubClient":
        return cls(
            str(settings.get_value("hub", "tags_url")),
            page_size=int(settings.get_value("hub", "page_size", default=100)),
            timeout=float(settings.get_value("hub", "timeout_sec", default=10)),
        )

    def fetch_tags(self) -> List[Tag]:
        """Возвращает теги в порядке, в котором их отдаёт Docker Hub."""

        tags: List[Tag] = []
        url: Optional[str] = self._tags_url
        params: Optional[Dict[str, Any]] = {"page_size": self._page_size}
        while url:
            page = self._get_page(url, params)
            tags.extend(
                Tag.from_dict(item) for item in page.get("results") or [] if isinstance(item, dict)
            )
            url = page.get("next")
            # ссылка next уже содержит параметры запроса
            params = None
        LOGGER.debug("Fetched %d tags from %s", len(tags), self._tags_url)
        return tags

    def _get_page(self, url: str, params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        try:
            response = self._session.get(url, params=params, timeout=self._timeout)
        except requests.exceptions.RequestException as exc:
            raise HubAPIError(f"Failed to fetch tags: {exc}", context={"url": url}) from exc
        if not response.ok:
            raise HubAPIError(
                f"Failed to fetch tags: HTTP {response.status_code}",
                context={"url": url, "status": response.status_code},
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise HubAPIError(
                f"Failed to parse tags response: {exc}", context={"url": url}
            ) from exc
        if not isinstance(payload, dict):
            raise HubAPIError("Failed to parse tags response: object expected", context={"url": url})
        return payload

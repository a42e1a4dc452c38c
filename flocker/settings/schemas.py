"""Определение дефолтной схемы settings.json."""

from __future__ import annotations

from typing import Any, Dict

# DEFAULT_SETTINGS служит шаблоном для начального settings.json
DEFAULT_SETTINGS: Dict[str, Any] = {
    "version": "1.0.0",
    "logging": {
        "enabled": True,
        "level": "INFO",
        "max_file_size_mb": 10,
        "max_archived_files": 5,
    },
    "docker": {
        "base_url": "",
        "image_repository": "fluree/server",
        "container_port": 8090,
        "data_path": "/opt/fluree-server/data",
        "logs_tail": 1000,
    },
    "hub": {
        "tags_url": "https://hub.docker.com/v2/repositories/fluree/server/tags",
        "page_size": 100,
        "timeout_sec": 10,
    },
}

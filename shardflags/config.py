# shardflags/config.py
"""Environment-based settings for the ShardFlags service.

Values are read from the process environment after loading a local
``.env`` file, if one exists.
"""


from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv


DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:5173"


def _as_bool(raw: str) -> bool:
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Runtime settings.

    Attributes:
        port: HTTP port of the development server.
        debug: Flask debug mode.
        log_level: Root log level name.
        log_json: Render logs as JSON lines instead of console output.
        admin_api_key: If set, required in ``X-Api-Key`` for admin routes.
        flags_config_path: Flags configuration loaded at startup.
        bandits_config_path: Bandit models loaded at startup.
        bandit_total_shards: Hash space used for bandit action selection.
        cors_origins: Origins allowed to call the API from a browser.
    """

    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool = False
    admin_api_key: Optional[str] = None
    flags_config_path: Optional[str] = None
    bandits_config_path: Optional[str] = None
    bandit_total_shards: int = 10_000
    cors_origins: List[str] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        origins = os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
        return cls(
            port=int(os.getenv("BACKEND_PORT", "8000")),
            debug=_as_bool(os.getenv("DEBUG", "false")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_json=_as_bool(os.getenv("LOG_JSON", "false")),
            admin_api_key=os.getenv("ADMIN_API_KEY") or None,
            flags_config_path=os.getenv("FLAGS_CONFIG_PATH") or None,
            bandits_config_path=os.getenv("BANDITS_CONFIG_PATH") or None,
            bandit_total_shards=int(os.getenv("BANDIT_TOTAL_SHARDS", "10000")),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )

"""Client configuration loading and validation."""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, ClassVar, Dict, Iterable, Literal

import yaml
from pydantic import AnyUrl, Field, PositiveFloat, PositiveInt
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_LOCATIONS: tuple[Path, ...] = (
    Path("/etc/pumpchat/client.yaml"),
    Path("/etc/pumpchat/client.yml"),
    Path("./config/client.yaml"),
    Path("./config/client.yml"),
)

ANONYMOUS_USERNAME = "anonymous"


class ChatSettings(BaseSettings):
    """Validated, immutable settings for one chat client instance."""

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_prefix="PUMPCHAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Endpoint + identity
    ws_url: AnyUrl = Field(
        default="wss://livechat.pump.fun/socket.io/?EIO=4&transport=websocket",
        description="Socket.IO WebSocket endpoint of the live-chat service.",
    )
    origin: str = Field(
        default="https://pump.fun",
        description="Origin header and handshake origin presented to the server.",
    )
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        description="Browser-like User-Agent sent with the upgrade request.",
    )
    room_id: str = Field(
        min_length=1,
        description="Token address / room identifier to join.",
    )
    username: str = Field(
        default=ANONYMOUS_USERNAME,
        description="Display handle used when joining and sending.",
    )
    history_limit: PositiveInt = Field(
        default=100,
        description="Maximum number of chat messages kept in memory.",
    )
    transport: Literal["dummy", "websocket"] = Field(
        default="websocket",
        description="Transport implementation to use.",
    )
    connect_timeout_seconds: PositiveFloat = Field(
        default=10.0,
        description="Seconds to wait for the WebSocket upgrade before counting a failure.",
    )

    # Correlation + reliability
    ack_ttl_seconds: PositiveFloat = Field(
        default=30.0,
        description="Age after which an unanswered request can no longer be correlated.",
    )
    ack_sweep_interval_seconds: PositiveFloat = Field(
        default=10.0,
        description="Period of the stale acknowledgment sweep.",
    )
    reconnect_base_delay_seconds: PositiveFloat = Field(
        default=1.0,
        description="Base delay for reconnection backoff (doubled per attempt).",
    )
    reconnect_max_delay_seconds: PositiveFloat = Field(
        default=30.0,
        description="Upper bound on a single reconnection delay.",
    )
    reconnect_max_attempts: PositiveInt = Field(
        default=5,
        description="Consecutive failed attempts before the client gives up.",
    )

    # Hand-off to the dialogue scheduler
    relay_queue_max: PositiveInt = Field(
        default=500,
        description="Inbound messages buffered for the scheduler before the oldest are dropped.",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Minimum log level for the client process.",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        if isinstance(value, str):
            return value.upper()
        return value

    @field_validator("room_id", mode="before")
    @classmethod
    def _strip_room_id(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("username", mode="before")
    @classmethod
    def _default_username(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return ANONYMOUS_USERNAME
        return value

    config_path: Path | None = Field(
        default=None,
        description="Resolved path to the on-disk config that seeded the settings.",
        exclude=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[ChatSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            cls._yaml_settings_source,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )

    @staticmethod
    def _yaml_settings_source(settings_cls: type[ChatSettings] | None = None) -> Dict[str, Any]:
        candidates: Iterable[Path] = ChatSettings._resolve_candidate_paths()

        for path in candidates:
            data = ChatSettings._load_file(path)
            if data is not None:
                data.setdefault("config_path", path)
                return data
        return {}

    @staticmethod
    def _resolve_candidate_paths() -> Iterable[Path]:
        explicit = os.getenv("PUMPCHAT_CONFIG_FILE")
        if explicit:
            yield Path(explicit).expanduser()
        yield from DEFAULT_CONFIG_LOCATIONS

    @staticmethod
    def _load_file(path: Path) -> Dict[str, Any] | None:
        if not path.is_file():
            return None
        suffix = path.suffix.lower()
        try:
            with path.open("r", encoding="utf-8") as handle:
                if suffix in {".yaml", ".yml"}:
                    raw = yaml.safe_load(handle)
                elif suffix == ".json":
                    raw = json.load(handle)
                else:
                    return None
        except OSError as exc:
            raise RuntimeError(f"Failed to read client config file {path}") from exc
        except (yaml.YAMLError, json.JSONDecodeError) as exc:
            raise ValueError(f"Invalid client config file {path}") from exc

        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ValueError(f"Client config file {path} must contain a mapping at top level.")
        return raw


@lru_cache()
def get_settings() -> ChatSettings:
    """Return memoized client settings."""

    return ChatSettings()

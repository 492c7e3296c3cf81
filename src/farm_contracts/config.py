from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass(slots=True)
class StoreConfig:
    url: str | None = None
    api_key: str | None = None
    access_token: str | None = None
    schema: str = "public"
    table: str = "contract_farming"
    timeout_seconds: float = 30.0


@dataclass(slots=True)
class QueryConfig:
    page_size: int = 50
    max_pages: int = 20


@dataclass(slots=True)
class AppConfig:
    store: StoreConfig = field(default_factory=StoreConfig)
    query: QueryConfig = field(default_factory=QueryConfig)
    user_agent: str = "farm-contracts/0.1"
    log_level: str = "WARNING"


def _merge(default: Any, override: Any) -> Any:
    if isinstance(default, dict) and isinstance(override, dict):
        merged: dict[str, Any] = {**default}
        for key, value in override.items():
            merged[key] = _merge(default.get(key), value)
        return merged
    return override if override is not None else default


def load_config(path: Path) -> AppConfig:
    data: dict[str, Any] = {}
    if path.exists():
        data = _read_toml(path)

    defaults = AppConfig()
    merged = _merge(_as_dict(defaults), data)

    config = AppConfig(
        store=StoreConfig(**merged.get("store", {})),
        query=QueryConfig(**merged.get("query", {})),
        user_agent=merged.get("user_agent", defaults.user_agent),
        log_level=merged.get("log_level", defaults.log_level),
    )

    if env_url := os.getenv("SUPABASE_URL"):
        config.store.url = env_url.strip()
    if env_key := os.getenv("SUPABASE_ANON_KEY"):
        config.store.api_key = env_key.strip()
    if env_token := os.getenv("SUPABASE_ACCESS_TOKEN"):
        token = env_token.strip()
        if token.lower().startswith("bearer "):
            token = token[7:].strip()
        config.store.access_token = token
    if env_level := os.getenv("FARM_CONTRACTS_LOG_LEVEL"):
        config.log_level = env_level

    config.log_level = config.log_level.upper()
    if config.store.url:
        config.store.url = config.store.url.rstrip("/")
    return config


def require_store(config: AppConfig) -> None:
    if not config.store.url or not config.store.api_key:
        raise RuntimeError(
            "Missing Supabase URL or API key "
            "(set SUPABASE_URL and SUPABASE_ANON_KEY or [store] in config.toml)"
        )


def config_path(cli_path: str | None) -> Path:
    if cli_path:
        return Path(cli_path).expanduser()
    if env_path := os.getenv("FARM_CONTRACTS_CONFIG"):
        return Path(env_path).expanduser()
    return Path("config.toml")


def _read_toml(path: Path) -> dict[str, Any]:
    import tomllib

    with path.open("rb") as handle:
        return tomllib.load(handle)


def _as_dict(config: AppConfig) -> dict[str, Any]:
    return {
        "user_agent": config.user_agent,
        "log_level": config.log_level,
        "store": {
            "url": config.store.url,
            "api_key": config.store.api_key,
            "access_token": config.store.access_token,
            "schema": config.store.schema,
            "table": config.store.table,
            "timeout_seconds": config.store.timeout_seconds,
        },
        "query": {
            "page_size": config.query.page_size,
            "max_pages": config.query.max_pages,
        },
    }

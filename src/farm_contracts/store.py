from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from .config import AppConfig, require_store
from .errors import (
    AuthorizationError,
    QueryError,
    RemoteStoreError,
    StoreConnectionError,
)
from .models import ContractFarmingOpportunity
from .query import Pager, ReadOptions, build_params
from .records import parse_opportunities

logger = logging.getLogger(__name__)


def fetch_opportunities(
    config: AppConfig,
    options: ReadOptions | None = None,
    client: httpx.Client | None = None,
) -> list[ContractFarmingOpportunity]:
    """Read opportunities with their documents and reviews, newest first.

    The read is bounded by ``options.limit`` and ``config.query.max_pages``.
    A caller-supplied ``client`` is used as is and left open.
    """
    require_store(config)
    options = options or ReadOptions()
    if client is not None:
        return _fetch_all(client, config, options)
    with httpx.Client(timeout=config.store.timeout_seconds) as owned:
        return _fetch_all(owned, config, options)


async def afetch_opportunities(
    config: AppConfig,
    options: ReadOptions | None = None,
    client: httpx.AsyncClient | None = None,
) -> list[ContractFarmingOpportunity]:
    """Async variant of :func:`fetch_opportunities`.

    The whole read, all pages included, must finish within
    ``config.store.timeout_seconds``. Cancelling the awaiting task cancels
    the in-flight request.
    """
    require_store(config)
    options = options or ReadOptions()
    try:
        async with asyncio.timeout(config.store.timeout_seconds):
            if client is not None:
                return await _afetch_all(client, config, options)
            async with httpx.AsyncClient(timeout=config.store.timeout_seconds) as owned:
                return await _afetch_all(owned, config, options)
    except TimeoutError as exc:
        logger.warning("Read of %s exceeded %.1fs", config.store.table, config.store.timeout_seconds)
        raise StoreConnectionError(
            f"Read did not finish within {config.store.timeout_seconds}s"
        ) from exc


def get_opportunity(
    config: AppConfig,
    opportunity_id: str,
    client: httpx.Client | None = None,
) -> ContractFarmingOpportunity | None:
    options = ReadOptions(opportunity_id=opportunity_id, limit=1)
    results = fetch_opportunities(config, options, client=client)
    return results[0] if results else None


async def aget_opportunity(
    config: AppConfig,
    opportunity_id: str,
    client: httpx.AsyncClient | None = None,
) -> ContractFarmingOpportunity | None:
    options = ReadOptions(opportunity_id=opportunity_id, limit=1)
    results = await afetch_opportunities(config, options, client=client)
    return results[0] if results else None


def _fetch_all(
    client: httpx.Client, config: AppConfig, options: ReadOptions
) -> list[ContractFarmingOpportunity]:
    url = _table_url(config)
    headers = _headers(config)
    pager = Pager.for_read(options, config.query.page_size, config.query.max_pages)
    opportunities: list[ContractFarmingOpportunity] = []

    while (size := pager.next_size()) is not None:
        params = build_params(options, size, pager.offset)
        logger.debug("GET %s offset=%d limit=%d", url, pager.offset, size)
        try:
            response = client.get(url, params=params, headers=headers)
        except httpx.TransportError as exc:
            raise _connection_error(url, exc) from exc

        batch = _read_page(response, pager.offset)
        opportunities.extend(batch)
        pager.advance(len(batch))

    return _newest_first(opportunities)


async def _afetch_all(
    client: httpx.AsyncClient, config: AppConfig, options: ReadOptions
) -> list[ContractFarmingOpportunity]:
    url = _table_url(config)
    headers = _headers(config)
    pager = Pager.for_read(options, config.query.page_size, config.query.max_pages)
    opportunities: list[ContractFarmingOpportunity] = []

    while (size := pager.next_size()) is not None:
        params = build_params(options, size, pager.offset)
        logger.debug("GET %s offset=%d limit=%d", url, pager.offset, size)
        try:
            response = await client.get(url, params=params, headers=headers)
        except httpx.TransportError as exc:
            raise _connection_error(url, exc) from exc

        batch = _read_page(response, pager.offset)
        opportunities.extend(batch)
        pager.advance(len(batch))

    return _newest_first(opportunities)


def _read_page(response: httpx.Response, offset: int) -> list[ContractFarmingOpportunity]:
    # redirects are not followed, so anything but 2xx is a failed read
    if not response.is_success:
        raise _status_error(response)
    return parse_opportunities(response.content, start=offset)


def _newest_first(
    opportunities: list[ContractFarmingOpportunity],
) -> list[ContractFarmingOpportunity]:
    return sorted(opportunities, key=lambda opp: opp.created_at, reverse=True)


def _connection_error(url: str, exc: httpx.TransportError) -> StoreConnectionError:
    logger.warning("Cannot reach %s: %s", url, exc)
    return StoreConnectionError(f"Cannot reach remote store: {exc}")


def _status_error(response: httpx.Response) -> RemoteStoreError:
    body = _error_body(response)
    status = response.status_code
    code = _to_str(body.get("code"))
    message = _to_str(body.get("message")) or response.reason_phrase or f"HTTP {status}"
    details = body.get("details") or body.get("hint")

    error_cls: type[RemoteStoreError]
    if status in (401, 403):
        error_cls = AuthorizationError
    elif code and code.startswith("PGRST0"):
        error_cls = StoreConnectionError
    elif status in (400, 404) or (code and code.startswith(("PGRST1", "PGRST2"))):
        error_cls = QueryError
    else:
        error_cls = RemoteStoreError

    logger.warning("Remote store returned %d (%s): %s", status, code or "-", message)
    return error_cls(message, status_code=status, code=code, details=details)


def _error_body(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _table_url(config: AppConfig) -> str:
    return f"{config.store.url}/rest/v1/{config.store.table}"


def _headers(config: AppConfig) -> dict[str, str]:
    token = config.store.access_token or config.store.api_key
    return {
        "apikey": config.store.api_key or "",
        "Authorization": f"Bearer {token}",
        "Accept": "application/json",
        "Accept-Profile": config.store.schema,
        "User-Agent": config.user_agent,
    }


def _to_str(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    return str(value).strip() or None

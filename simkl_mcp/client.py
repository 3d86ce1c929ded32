"""Async HTTP client for the Simkl API.

Adds client_id to every request, sends the bearer token when one is given,
and reads the X-Pagination-* headers Simkl returns on list endpoints.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, replace
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.simkl.com"
RESPONSE_SIZE_LIMIT = 500_000
ERROR_BODY_PREFIX = 1024

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

_PAGINATION_HEADERS = {
    "page": "X-Pagination-Page",
    "limit": "X-Pagination-Limit",
    "page_count": "X-Pagination-Page-Count",
    "item_count": "X-Pagination-Item-Count",
}


class SimklApiError(Exception):
    """Transport or protocol failure talking to Simkl.

    status_code is 0 when no HTTP response was received.
    """

    def __init__(self, message: str, status_code: int, response_body: Optional[str]):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


@dataclass(frozen=True)
class PaginationInfo:
    page: int
    limit: int
    page_count: int
    item_count: int


@dataclass(frozen=True)
class PaginatedResult:
    data: Any
    pagination: Optional[PaginationInfo]


def _parse_header_int(headers: httpx.Headers, name: str) -> Optional[int]:
    value = headers.get(name)
    if not value:
        return None
    # Leading digits only, so "12abc" reads as 12
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def parse_pagination(headers: httpx.Headers) -> Optional[PaginationInfo]:
    """Return pagination info, or None unless all four headers start with an integer."""
    values = {key: _parse_header_int(headers, header) for key, header in _PAGINATION_HEADERS.items()}
    if any(v is None for v in values.values()):
        return None
    return PaginationInfo(**values)


class SimklClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        client_id: str = "",
        timeout: float = 30.0,
        http: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.client_id = client_id
        self._http = http or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> SimklClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def request(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        query: Optional[dict[str, Any]] = None,
        body: Any = None,
        token: Optional[str] = None,
    ) -> Any:
        result = await self._do_request(endpoint, method, query, body, token)
        return result.data

    async def request_paginated(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        query: Optional[dict[str, Any]] = None,
        body: Any = None,
        token: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        fetch_all_pages: bool = False,
        max_pages: Optional[int] = None,
    ) -> PaginatedResult:
        """Fetch one page, or every page up to max_pages when fetch_all_pages is set.

        Pages are fetched one after another in increasing order. The
        returned pagination reports the last page actually fetched as
        page_count.
        """
        base_query = dict(query or {})
        if page is not None:
            base_query["page"] = page
        if limit is not None:
            base_query["limit"] = limit

        first = await self._do_request(endpoint, method, base_query, body, token)
        if not fetch_all_pages or first.pagination is None:
            return first

        if not isinstance(first.data, list):
            raise SimklApiError("simkl api error: fetchAllPages requires array response", 0, None)

        items = list(first.data)
        last_page = first.pagination.page_count
        if max_pages is not None:
            last_page = min(max_pages, last_page)

        for next_page in range(first.pagination.page + 1, last_page + 1):
            result = await self._do_request(
                endpoint, method, {**base_query, "page": next_page}, body, token,
            )
            if not isinstance(result.data, list):
                raise SimklApiError("simkl api error: fetchAllPages requires array response", 0, None)
            items.extend(result.data)

        return PaginatedResult(
            data=items,
            pagination=replace(first.pagination, page_count=last_page),
        )

    def _build_url(self, endpoint: str) -> str:
        path = endpoint if endpoint.startswith("/") else f"/{endpoint}"
        return f"{self.base_url}{path}"

    def _build_params(self, query: Optional[dict[str, Any]]) -> dict[str, Any]:
        params: dict[str, Any] = {"client_id": self.client_id}
        for key, value in (query or {}).items():
            if value is None:
                continue
            params[key] = value
        return params

    def _build_headers(self, token: Optional[str]) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _do_request(
        self,
        endpoint: str,
        method: str,
        query: Optional[dict[str, Any]],
        body: Any,
        token: Optional[str],
    ) -> PaginatedResult:
        method = method.upper()
        content = None
        if body is not None and method != "GET":
            content = json.dumps(body).encode()

        logger.debug("%s %s", method, endpoint)
        try:
            async with self._http.stream(
                method,
                self._build_url(endpoint),
                params=self._build_params(query),
                headers=self._build_headers(token),
                content=content,
            ) as response:
                if response.status_code == 204:
                    return PaginatedResult(data={}, pagination=None)
                if response.status_code == 302:
                    return PaginatedResult(
                        data={"redirectUrl": response.headers.get("location")},
                        pagination=None,
                    )
                text = await self._read_body(response)
        except httpx.HTTPError as e:
            raise SimklApiError(f"simkl api request failed: {e}", 0, None) from e

        if not response.is_success:
            raise SimklApiError(
                f"simkl api error: {response.status_code} {response.reason_phrase}",
                response.status_code,
                text,
            )

        pagination = parse_pagination(response.headers)
        if not text:
            return PaginatedResult(data=None, pagination=pagination)

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SimklApiError(
                "simkl api error: invalid json response", response.status_code, text,
            ) from e
        return PaginatedResult(data=data, pagination=pagination)

    async def _read_body(self, response: httpx.Response) -> str:
        chunks: list[str] = []
        size = 0
        async for chunk in response.aiter_text():
            chunks.append(chunk)
            size += len(chunk)
            if size > RESPONSE_SIZE_LIMIT:
                raise SimklApiError(
                    "simkl api error: response too large",
                    response.status_code,
                    "".join(chunks)[:ERROR_BODY_PREFIX],
                )
        return "".join(chunks)

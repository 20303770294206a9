from __future__ import annotations

from typing import Any, Callable, Dict, Iterator, Optional, TypeVar

import httpx

from openwire.config import ClientConfig
from openwire.core.exceptions import TransportError
from openwire.core.logger import configure_root_logger, get_logger, push_request_id, reset_request_id
from openwire.models.pagination import PageRequest, PageResponse, iter_items, iter_pages

logger = get_logger(__name__)

T = TypeVar("T")


class JsonTransport:
    """Sends encoded wire objects and returns decoded JSON.

    Auth, retries and streaming belong to the caller's HTTP setup; pass a
    preconfigured ``httpx.Client`` to add them.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        client: Optional[httpx.Client] = None,
    ):
        self.config = config or ClientConfig()
        configure_root_logger(self.config.log_level)
        self._client = client or httpx.Client(
            base_url=self.config.base_url,
            timeout=self.config.timeout_seconds,
            headers=dict(self.config.headers),
        )

    def _json(self, resp: httpx.Response) -> Dict[str, Any]:
        token = push_request_id(resp.headers.get("x-request-id"))
        try:
            return self._decode(resp)
        finally:
            reset_request_id(token)

    def _decode(self, resp: httpx.Response) -> Dict[str, Any]:
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError:
            logger.warning(f"{resp.request.method} {resp.request.url} failed with status {resp.status_code}")
            raise
        try:
            data: Any = resp.json()
        except ValueError as e:
            content_type = resp.headers.get("content-type", "unknown")
            raise TransportError(
                f"Failed to parse API response as JSON. "
                f"Status: {resp.status_code}, Content-Type: {content_type}. "
                f"Response preview: {resp.text[:500]}"
            ) from e
        if not isinstance(data, dict):
            raise TransportError(f"Expected a JSON object, got {type(data).__name__}")
        return data

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._json(self._client.request("GET", path, params=params or None))

    def post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        return self._json(self._client.request("POST", path, json=body))

    def page_request(self, **params: Any) -> PageRequest:
        """PageRequest bounded by this client's configured limits.

        Without an explicit ``limit`` the configured ``default_page_limit`` is
        sent; when that is unset too, the server default applies.
        """
        bounds = self.config.page_bounds()
        if params.get("limit") is None and bounds.default_limit is not None:
            params["limit"] = bounds.default_limit
        return PageRequest(bounds=bounds, **params)

    def get_page(
        self,
        path: str,
        request: PageRequest,
        item_decoder: Callable[[Any], T],
    ) -> PageResponse[T]:
        params = request.to_query_params()
        page = PageResponse.from_wire(self.get(path, params), item_decoder)
        logger.debug(f"GET {path} {params} -> {len(page)} items, has_more={page.has_more}")
        return page

    def iter_pages(
        self,
        path: str,
        item_decoder: Callable[[Any], T],
        request: Optional[PageRequest] = None,
    ) -> Iterator[PageResponse[T]]:
        return iter_pages(lambda req: self.get_page(path, req, item_decoder), request or self.page_request())

    def iter_items(
        self,
        path: str,
        item_decoder: Callable[[Any], T],
        request: Optional[PageRequest] = None,
    ) -> Iterator[T]:
        return iter_items(lambda req: self.get_page(path, req, item_decoder), request or self.page_request())

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "JsonTransport":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

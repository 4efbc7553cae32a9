
# robotevents/client.py
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Type, TypeVar, Union
from urllib.parse import urljoin

import requests
from pydantic import BaseModel, ValidationError
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .auth import attach_headers
from .config import Settings, get_settings
from .errors import InvalidArgumentError, RobotEventsAPIError
from .models import QueryFilter, encode_params

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

Filter = Union[QueryFilter, Dict[str, Any], None]


def filter_to_params(options: Filter) -> Dict[str, Any]:
    """Accept a filter model, a plain dict, or None and return query params."""
    if options is None:
        return {}
    if isinstance(options, QueryFilter):
        return options.to_params()
    if isinstance(options, dict):
        return encode_params(options)
    raise InvalidArgumentError(f"Unsupported filter type: {type(options).__name__}")


class RobotEventsClient:
    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        retries: int | None = None,
        per_page: int | None = None,
        rate_delay: float = 0.0,  # optional pacing between pages
        pool_connections: int = 10,
        pool_maxsize: int = 20,
        settings: Settings | None = None,
    ):
        settings = settings or get_settings()
        self.token = token if token is not None else settings.token
        self.base_url = (base_url or settings.base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.timeout
        self.retries = max(0, int(retries if retries is not None else settings.retries))
        self.per_page = int(per_page or settings.per_page)
        self.rate_delay = max(0.0, float(rate_delay))

        self.session = requests.Session()
        attach_headers(self.session, self.token)

        # Retry/backoff for idempotent methods only.
        retry = Retry(
            total=self.retries,
            backoff_factor=0.5,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=("GET", "HEAD", "OPTIONS"),
            raise_on_status=False,
            respect_retry_after_header=True,
        )
        adapter = HTTPAdapter(
            max_retries=retry,
            pool_connections=pool_connections,
            pool_maxsize=pool_maxsize,
        )
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "RobotEventsClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ------------------------ Internal helpers ------------------------

    def _build_url(self, path: str) -> str:
        if path.startswith("/"):
            return f"{self.base_url}{path}"
        return urljoin(self.base_url + "/", path)

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict | List:
        """Centralized request with pooled session and retry/backoff."""
        url = self._build_url(path)
        logger.debug("%s %s params=%s", method.upper(), url, params)
        try:
            resp = self.session.request(
                method.upper(),
                url,
                params=(params or {}),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise RobotEventsAPIError(f"Network error calling {url}: {e}", url=url) from e

        if resp.status_code >= 400:
            preview = ""
            try:
                preview = (resp.text or "").strip()[:400]
            except Exception:
                preview = ""
            raise RobotEventsAPIError(
                f"HTTP {resp.status_code} for {url}: {preview}",
                status=resp.status_code,
                url=url,
            )

        # 204 No Content -> empty dict
        if resp.status_code == 204:
            return {}

        try:
            return resp.json()
        except ValueError as e:
            raise RobotEventsAPIError("Invalid JSON response", status=resp.status_code, url=url) from e

    def _get(self, path: str, params: Optional[Dict] = None) -> Dict | List:
        return self._request("GET", path, params=params)

    # ------------------------ Pagination ------------------------

    def _paginate_pages(
        self,
        path: str,
        *,
        start_page: int = 1,
        params: Optional[dict] = None,
    ) -> List[Dict]:
        """Fetch all pages using per_page/page until meta.last_page is reached."""
        q = dict(params or {})
        q.update({"per_page": self.per_page, "page": start_page})
        data = self._get(path, params=q)

        # A bare list is a complete result
        if isinstance(data, list):
            return data
        if not isinstance(data, dict):
            raise RobotEventsAPIError(
                f"Unexpected payload type for {path}", url=self._build_url(path)
            )

        all_items: List[Dict] = list(data.get("data") or [])
        meta = data.get("meta") or {}
        last_page = int(meta.get("last_page") or start_page)

        for page in range(start_page + 1, last_page + 1):
            if self.rate_delay:
                time.sleep(self.rate_delay)
            q = dict(params or {})
            q.update({"per_page": self.per_page, "page": page})
            d = self._get(path, params=q)
            batch = d.get("data") if isinstance(d, dict) else d
            if not batch:
                break
            all_items.extend(batch)
        return all_items

    def _decode(self, path: str, model: Type[M], raw: Any) -> M:
        try:
            return model.model_validate(raw)
        except ValidationError as e:
            raise RobotEventsAPIError(
                f"Invalid {model.__name__} payload from {path}: {e}",
                url=self._build_url(path),
            ) from e

    # ------------------------ Public API (blocking) ------------------------

    def get_list(
        self,
        path: str,
        options: Filter = None,
        start_page: int = 1,
        model: Optional[Type[M]] = None,
    ) -> List[Any]:
        """Return every record of a listing endpoint, following pagination."""
        rows = self._paginate_pages(path, start_page=start_page, params=filter_to_params(options))
        if model is None:
            return rows
        return [self._decode(path, model, r) for r in rows]

    def get_one(
        self,
        path: str,
        options: Filter = None,
        model: Optional[Type[M]] = None,
    ) -> Any:
        """Return the single record served at ``path``."""
        data = self._get(path, params=filter_to_params(options))
        if model is None:
            return data
        if not isinstance(data, dict):
            raise RobotEventsAPIError(
                f"Unexpected payload for {path}", url=self._build_url(path)
            )
        return self._decode(path, model, data)

    # ------------------------ Public API (async) ------------------------

    async def fetch_list(
        self,
        path: str,
        options: Filter = None,
        start_page: int = 1,
        model: Optional[Type[M]] = None,
    ) -> List[Any]:
        """Awaitable ``get_list``; the blocking request runs in a worker thread."""
        return await asyncio.to_thread(self.get_list, path, options, start_page, model)

    async def fetch_one(
        self,
        path: str,
        options: Filter = None,
        model: Optional[Type[M]] = None,
    ) -> Any:
        """Awaitable ``get_one``; the blocking request runs in a worker thread."""
        return await asyncio.to_thread(self.get_one, path, options, model)


# ------------------------ Process-wide default ------------------------

_default_client: Optional[RobotEventsClient] = None


def get_default_client() -> RobotEventsClient:
    """Return the shared client, building it from settings on first use."""
    global _default_client
    if _default_client is None:
        _default_client = RobotEventsClient()
    return _default_client


def set_default_client(client: Optional[RobotEventsClient]) -> None:
    """Replace (or with None, reset) the shared client."""
    global _default_client
    _default_client = client


__all__ = [
    "RobotEventsClient",
    "RobotEventsAPIError",
    "filter_to_params",
    "get_default_client",
    "set_default_client",
]

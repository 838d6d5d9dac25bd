from __future__ import annotations

import logging
from typing import Any

import httpx

from core.errors import AppException, geocoding_failed
from core.settings import DEFAULT_LOCATIONIQ_SEARCH_URL, Settings
from schemas.place import Coordinates

logger = logging.getLogger(__name__)

ZERO_RESULTS_STATUS = "ZERO_RESULTS"


class GeocodingClient:
    """Resolves free-text addresses to coordinates through LocationIQ search.

    One request per lookup: no caching, no retries, no fallback provider.
    Every failure surfaces as a 422 ``GEOCODING_FAILED`` error because the
    caller has to reject the address either way.
    """

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = DEFAULT_LOCATIONIQ_SEARCH_URL,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeocodingClient":
        return cls(
            api_key=settings.locationiq_api_key,
            base_url=settings.locationiq_search_url,
            timeout=settings.geocoding_timeout_seconds,
        )

    def _fail(self, address: str, reason: str) -> AppException:
        logger.warning("geocoding_failed reason=%s address=%r", reason, address)
        return geocoding_failed(address=address, reason=reason)

    async def _search(self, address: str) -> Any:
        params = {"key": self._api_key, "q": address, "format": "json"}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(self._base_url, params=params)
        except httpx.HTTPError as err:
            raise self._fail(address, f"request failed: {type(err).__name__}") from err

        if response.status_code == 404:
            # LocationIQ answers "Unable to geocode" with a 404.
            raise self._fail(address, "no results")
        if response.is_error:
            raise self._fail(address, f"provider returned HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as err:
            raise self._fail(address, "provider returned invalid JSON") from err

    async def resolve_coordinates(self, address: str) -> Coordinates:
        if not self._api_key:
            raise self._fail(address, "geocoding API key is not configured")

        payload = await self._search(address)

        if not payload:
            raise self._fail(address, "no results")
        if isinstance(payload, dict):
            if payload.get("status") == ZERO_RESULTS_STATUS or "error" in payload:
                raise self._fail(address, "no results")
            raise self._fail(address, "unexpected response shape")
        if not isinstance(payload, list):
            raise self._fail(address, "unexpected response shape")

        first = payload[0]
        if not isinstance(first, dict) or first.get("lat") is None or first.get("lon") is None:
            raise self._fail(address, "first result has no coordinates")

        try:
            return Coordinates(lat=float(first["lat"]), lng=float(first["lon"]))
        except (TypeError, ValueError) as err:
            raise self._fail(address, "first result has invalid coordinates") from err

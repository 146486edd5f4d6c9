"""Position fixes from a local HTTP position service.

The service answers ``GET <url>`` with a JSON object such as
``{"latitude": 45.46, "longitude": 9.19, "accuracy": 12.5}``; ``lat``,
``lng`` and ``lon`` are accepted as well.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import aiohttp
from pydantic import ValidationError

from pyroadsigns.exceptions import GeolocationDeniedError, GeolocationUnavailableError
from pyroadsigns.models.position import Position, PositionOptions

_logger = logging.getLogger(__name__)

_DENIED_STATUSES = frozenset({401, 403})


class HttpGeolocationProvider:
    """Asks a position service over HTTP for the current fix.

    The caller owns *http_session* and closes it.
    """

    def __init__(self, url: str, http_session: aiohttp.ClientSession) -> None:
        self._url = url
        self._http = http_session

    @property
    def url(self) -> str:
        return self._url

    async def request_position(self, options: PositionOptions) -> Position:
        params = {
            "highAccuracy": "1" if options.high_accuracy else "0",
            "maximumAge": str(int(options.maximum_age * 1000)),
        }
        timeout = aiohttp.ClientTimeout(total=options.timeout)

        _logger.debug("GET %s", self._url)

        try:
            async with self._http.get(self._url, params=params, timeout=timeout) as resp:
                text = await resp.text()
                if resp.status in _DENIED_STATUSES:
                    raise GeolocationDeniedError(f"Position service refused access (HTTP {resp.status})")
                if resp.status != 200:
                    raise GeolocationUnavailableError(f"HTTP {resp.status} from position service: {text[:200]}")
        except (GeolocationDeniedError, GeolocationUnavailableError):
            raise
        except aiohttp.ClientError as exc:
            raise GeolocationUnavailableError(f"Position service request failed: {exc}") from exc

        try:
            body: Any = json.loads(text)
        except json.JSONDecodeError as exc:
            raise GeolocationUnavailableError(f"Invalid JSON from position service: {text[:200]}") from exc

        if not isinstance(body, dict):
            raise GeolocationUnavailableError("Position service returned no fix object")

        # Some services nest the fix under "coords", like the browser API.
        coords = body.get("coords")
        payload = {**body, **coords} if isinstance(coords, dict) else body
        try:
            return Position.model_validate(payload)
        except ValidationError as exc:
            raise GeolocationUnavailableError(f"Position service returned an unusable fix: {exc.error_count()} error(s)") from exc

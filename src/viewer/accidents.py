"""AccidentControl - start/stop accident injection on the simulation server.

Plain request/response over HTTP:

    POST {base}/api/accidents/start  -> {"message": "..."}
    POST {base}/api/accidents/stop   -> {"message": "..."}

Failures are logged and reported to the caller; nothing is retried.  The
``active`` flag only flips when the server acknowledges the change.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

import httpx
from loguru import logger


@dataclass
class AccidentResult:
    ok: bool
    message: str
    active: bool

    def to_dict(self) -> dict:
        return asdict(self)


class AccidentControl:
    """Async HTTP client for the accident endpoints."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    async def start(self) -> AccidentResult:
        return await self._call("start", active_after=True)

    async def stop(self) -> AccidentResult:
        return await self._call("stop", active_after=False)

    async def toggle(self) -> AccidentResult:
        """Stop accidents if they are running, otherwise start them."""
        if self._active:
            return await self.stop()
        return await self.start()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _call(self, action: str, active_after: bool) -> AccidentResult:
        url = f"{self._base_url}/api/accidents/{action}"
        try:
            response = await self._client.post(url)
            response.raise_for_status()
            body = response.json()
            message = str(body.get("message", "")) if isinstance(body, dict) else ""
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Accident {action} failed: {e}")
            return AccidentResult(ok=False, message=str(e), active=self._active)

        self._active = active_after
        logger.info(f"Accident {action}: {message}")
        return AccidentResult(ok=True, message=message, active=self._active)

"""HTTP client for the Digest API."""
from __future__ import annotations

from typing import Any

import httpx

from digest_cli.errors import GENERIC_MESSAGE, NetworkError, error_from_response, error_from_transport


class ApiClient:
    """Async HTTP client for the Digest API. Failures raise digest_cli.errors.ApiError."""

    def __init__(self, api_url: str, transport: httpx.AsyncBaseTransport | None = None, timeout: float = 30.0):
        self.api_url = api_url.rstrip("/")
        self.client = httpx.AsyncClient(base_url=self.api_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _headers(self) -> dict:
        """Build request headers."""
        return {"Content-Type": "application/json", "Accept": "application/json"}

    async def request(self, method: str, path: str, data: dict | None = None, params: dict | None = None) -> Any:
        """Send one request and return the decoded JSON body."""
        try:
            res = await self.client.request(
                method,
                path,
                json=data,
                params={k: v for k, v in (params or {}).items() if v is not None},
                headers=self._headers(),
            )
        except httpx.TransportError as e:
            raise error_from_transport(e) from e

        if res.is_error:
            raise error_from_response(res)
        try:
            return res.json()
        except ValueError as e:
            # A proxy or misrouted request can answer 2xx with a page instead of JSON
            raise NetworkError(GENERIC_MESSAGE, res.status_code) from e

    async def get(self, path: str, params: dict | None = None) -> Any:
        """Make GET request."""
        return await self.request("GET", path, params=params)

    async def post(self, path: str, data: dict) -> Any:
        """Make POST request."""
        return await self.request("POST", path, data=data)

    # ── digests ──

    def _team(self, team_id: str) -> str:
        return f"/api/teams/{team_id}"

    async def list_digests(self, team_id: str, page: int = 1, is_template: bool = False) -> dict:
        """One page of digests: {"digests": [...], "digests_count": n, "per_page": n}."""
        params = {"page": page, "is_template": str(is_template).lower()}
        return await self.get(f"{self._team(team_id)}/digests", params)

    async def get_digest(self, team_id: str, digest_id: str) -> dict:
        """A digest with its blocks in order."""
        return await self.get(f"{self._team(team_id)}/digests/{digest_id}")

    # ── blocks ──

    async def create_block(self, team_id: str, digest_id: str, data: dict) -> dict:
        """
        Insert a block.

        Returns the block plus "digest_version". Resending the same
        "block_id" returns the block created the first time.
        """
        return await self.post(f"{self._team(team_id)}/digests/{digest_id}/blocks", data)

    async def update_block(self, team_id: str, digest_id: str, block_id: str, data: dict) -> dict:
        """Move and/or edit a block. Returns {"ok": true, "version": n}."""
        return await self.request("PATCH", f"{self._team(team_id)}/digests/{digest_id}/blocks/{block_id}", data=data)

    async def delete_block(
        self, team_id: str, digest_id: str, block_id: str, expected_version: int | None = None
    ) -> dict:
        """Remove a block. Returns {"ok": true, "version": n}."""
        return await self.request(
            "DELETE",
            f"{self._team(team_id)}/digests/{digest_id}/blocks/{block_id}",
            params={"expected_version": expected_version},
        )

    # ── bookmarks ──

    async def list_bookmarks(
        self,
        team_id: str,
        page: int = 1,
        search: str | None = None,
        only_not_in_digest: bool = False,
    ) -> dict:
        """One page of the bookmark pool."""
        params = {
            "page": page,
            "search": search or None,
            "only_not_in_digest": str(only_not_in_digest).lower(),
        }
        return await self.get(f"{self._team(team_id)}/bookmarks", params)

    async def close(self):
        """Close client."""
        await self.client.aclose()

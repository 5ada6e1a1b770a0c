"""HTTP client for the catalog-entry service.

Every mutating call carries the caller-asserted actor identity as
``X-USER-ID`` / ``X-USER-ROLE`` headers.
"""

from __future__ import annotations

from typing import Optional

import httpx
from pydantic import ValidationError

from listing_common import NetworkError, get_logger, get_settings
from listing_contracts import Actor, CatalogEntry, EntryPayload

from listing_client.base import ServiceClient

logger = get_logger(__name__)


class CatalogClient(ServiceClient):
    """Async client for ``/products``.

    Example:
        >>> async with CatalogClient() as catalog:
        ...     entry = await catalog.get("p-1")
        ...     print(entry.name, entry.images)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        super().__init__(
            base_url or settings.catalog_api_url,
            timeout=settings.request_timeout if timeout is None else timeout,
            transport=transport,
        )

    async def create(self, payload: EntryPayload, actor: Actor) -> CatalogEntry:
        """Create an entry owned by ``actor``.

        Raises:
            NetworkError: On API errors
        """
        data = await self._request(
            "POST", "/products", json=payload.to_wire(), headers=actor.headers()
        )
        entry = _entry_from(data, "/products")
        logger.info("entry_created", entry_id=entry.id, owner_id=actor.id)
        return entry

    async def update(self, entry_id: str, payload: EntryPayload, actor: Actor) -> CatalogEntry:
        """Replace an entry's fields and ordered image list.

        Raises:
            NetworkError: On API errors (403 when ``actor`` does not own it)
        """
        path = f"/products/{entry_id}"
        data = await self._request("PUT", path, json=payload.to_wire(), headers=actor.headers())
        entry = _entry_from(data, path)
        logger.info("entry_updated", entry_id=entry.id, images=len(entry.images))
        return entry

    async def delete(self, entry_id: str, actor: Actor) -> None:
        """Delete an entry.

        Raises:
            NetworkError: On API errors
        """
        await self._request("DELETE", f"/products/{entry_id}", headers=actor.headers())
        logger.info("entry_deleted", entry_id=entry_id)

    async def get(self, entry_id: str) -> CatalogEntry:
        """Fetch one entry snapshot."""
        path = f"/products/{entry_id}"
        return _entry_from(await self._request("GET", path), path)

    async def list_by_owner(self, owner_id: str) -> list[CatalogEntry]:
        """List the entries owned by one seller."""
        data = await self._request("GET", "/products", params={"sellerId": owner_id})
        return [CatalogEntry.model_validate(item) for item in data or []]


def _entry_from(data: object, endpoint: str) -> CatalogEntry:
    if not isinstance(data, dict):
        raise NetworkError("Response carried no entry", endpoint=endpoint)
    try:
        return CatalogEntry.model_validate(data)
    except ValidationError as e:
        raise NetworkError(f"Malformed entry in response: {e}", endpoint=endpoint) from e

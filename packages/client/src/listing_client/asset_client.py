"""HTTP client for the asset (media) service.

Uploads are pre-checked against the configured type and size limits before
any bytes leave the process. The service enforces the same limits again.
"""

from __future__ import annotations

from typing import Optional

import httpx
from pydantic import ValidationError

from listing_common import AttachmentRejected, NetworkError, get_logger, get_settings
from listing_contracts import Actor, AssetList, AssetRecord, LocalFile, OwnerType

from listing_client.base import ServiceClient

logger = get_logger(__name__)

IMAGES_PATH = "/media/images"


class AssetClient(ServiceClient):
    """Async client for ``/media/images``.

    Example:
        >>> async with AssetClient() as assets:
        ...     record = await assets.upload("p-1", OwnerType.ENTRY, file, actor)
        ...     print(record.url)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        super().__init__(
            base_url or settings.media_api_url,
            timeout=settings.request_timeout if timeout is None else timeout,
            transport=transport,
        )
        self.max_image_bytes = settings.max_image_bytes
        self.allowed_types = {
            OwnerType.ENTRY: frozenset(settings.entry_image_types),
            OwnerType.USER: frozenset(settings.avatar_image_types),
        }

    def check_upload(self, owner_type: OwnerType, file: LocalFile) -> None:
        """Raise ``AttachmentRejected`` if the service would refuse ``file``."""
        if file.content_type not in self.allowed_types[owner_type]:
            raise AttachmentRejected(
                "UNSUPPORTED_TYPE",
                f"Invalid {_label(owner_type)} file type: {file.content_type}",
            )
        if file.size > self.max_image_bytes:
            raise AttachmentRejected(
                "TOO_LARGE",
                f"{_label(owner_type).capitalize()} file size must be less than "
                f"{self.max_image_bytes // (1024 * 1024)}MB",
            )

    async def upload(
        self,
        owner_id: str,
        owner_type: OwnerType,
        file: LocalFile,
        actor: Actor,
    ) -> AssetRecord:
        """Upload one image for an entry or a user.

        Args:
            owner_id: Entry id (ENTRY) or user id (USER)
            owner_type: Owner kind
            file: Image to upload
            actor: Caller identity for the request headers

        Returns:
            The stored asset with its id and public URL

        Raises:
            AttachmentRejected: File type or size not accepted
            NetworkError: On API errors
        """
        self.check_upload(owner_type, file)

        data = await self._request(
            "POST",
            IMAGES_PATH,
            data={"ownerId": owner_id, "ownerType": owner_type.value},
            files={"file": (file.filename, file.content, file.content_type)},
            headers=actor.headers(),
        )
        try:
            record = AssetRecord.model_validate(data)
        except ValidationError as e:
            raise NetworkError(f"Malformed asset in response: {e}", endpoint=IMAGES_PATH) from e

        logger.info(
            "asset_uploaded",
            asset_id=record.id,
            owner_id=owner_id,
            owner_type=owner_type.value,
            filename=file.filename,
            size=file.size,
        )
        return record

    async def list(self, owner_id: str) -> list[AssetRecord]:
        """List every asset owned by an entry."""
        path = f"{IMAGES_PATH}/product/{owner_id}"
        data = await self._request("GET", path)
        try:
            return AssetList.model_validate(data or {}).images
        except ValidationError as e:
            raise NetworkError(f"Malformed asset list in response: {e}", endpoint=path) from e

    async def delete(self, asset_id: str, actor: Actor) -> None:
        """Delete one asset.

        Raises:
            NetworkError: On API errors
        """
        await self._request("DELETE", f"{IMAGES_PATH}/{asset_id}", headers=actor.headers())
        logger.info("asset_deleted", asset_id=asset_id)


def _label(owner_type: OwnerType) -> str:
    return "avatar" if owner_type is OwnerType.USER else "product image"

"""Shared fixtures for integration tests.

Provides an in-memory marketplace that serves both the catalog-entry and the
asset service over ``httpx.MockTransport``, so the real clients, the
coordinator and the CLI run end to end without a network.
"""

from __future__ import annotations

import itertools
import json
import re

import httpx
import pytest

from listing_client import AssetClient, CatalogClient

BASE_URL = "http://market.test/api"

_FIELD = re.compile(rb'name="(?P<name>[^"]+)"(?:; filename="(?P<filename>[^"]+)")?\r\n(?:[^\r\n]+\r\n)*\r\n')


def _form_fields(body: bytes) -> dict[str, str]:
    """Minimal multipart reader: field values plus the uploaded filename."""
    fields: dict[str, str] = {}
    for match in _FIELD.finditer(body):
        name = match.group("name").decode()
        if match.group("filename"):
            fields[name] = match.group("filename").decode()
            continue
        end = body.index(b"\r\n", match.end())
        fields[name] = body[match.end() : end].decode()
    return fields


def _ok(data, status: int = 200) -> httpx.Response:
    return httpx.Response(status, json={"success": True, "message": "OK", "data": data})


def _error(status: int, message: str) -> httpx.Response:
    return httpx.Response(status, json={"success": False, "message": message, "data": None})


class Marketplace:
    """Both services, backed by dicts.

    ``fail_uploads`` holds filenames the asset service refuses with a 500.
    """

    def __init__(self):
        self.products: dict[str, dict] = {}
        self.images: dict[str, dict] = {}
        self.fail_uploads: set[str] = set()
        self.requests: list[tuple[str, str]] = []
        self._product_ids = itertools.count(1)
        self._image_ids = itertools.count(1)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api")
        self.requests.append((request.method, path))
        user = request.headers.get("X-USER-ID")

        if path.startswith("/media/images"):
            return self._media(request, path, user)
        return self._products(request, path, user)

    def _products(self, request, path, user):
        if path == "/products" and request.method == "POST":
            body = json.loads(request.content)
            product_id = f"p-{next(self._product_ids)}"
            product = {"id": product_id, "userId": user, **body}
            self.products[product_id] = product
            return _ok(product, 201)
        if path == "/products" and request.method == "GET":
            seller = request.url.params.get("sellerId")
            return _ok([p for p in self.products.values() if p["userId"] == seller])

        product_id = path.rsplit("/", 1)[-1]
        product = self.products.get(product_id)
        if product is None:
            return _error(404, "Product not found")
        if request.method == "GET":
            return _ok(product)
        if product["userId"] != user:
            return _error(403, "You can only modify your own products")
        if request.method == "PUT":
            product.update(json.loads(request.content))
            return _ok(product)
        if request.method == "DELETE":
            del self.products[product_id]
            return _ok(None)
        return _error(405, "Method not allowed")

    def _media(self, request, path, user):
        if path == "/media/images" and request.method == "POST":
            fields = _form_fields(request.content)
            filename = fields["file"]
            if filename in self.fail_uploads:
                return _error(500, f"Storage error for {filename}")
            image_id = f"img-{next(self._image_ids)}"
            image = {
                "id": image_id,
                "url": f"https://cdn.market.test/{fields['ownerId']}/{image_id}-{filename}",
                "ownerId": fields["ownerId"],
                "ownerType": fields["ownerType"],
            }
            self.images[image_id] = image
            return _ok(image, 201)
        if path.startswith("/media/images/product/"):
            owner = path.rsplit("/", 1)[-1]
            owned = [i for i in self.images.values() if i["ownerId"] == owner]
            return _ok({"images": owned, "total": len(owned), "max": 5})
        if request.method == "DELETE":
            image_id = path.rsplit("/", 1)[-1]
            if self.images.pop(image_id, None) is None:
                return _error(404, "Image not found")
            return _ok(None)
        return _error(405, "Method not allowed")


@pytest.fixture
def marketplace():
    return Marketplace()


@pytest.fixture
async def clients(marketplace):
    """Real clients wired to the in-memory marketplace."""
    catalog = CatalogClient(base_url=BASE_URL, transport=marketplace.transport())
    assets = AssetClient(base_url=BASE_URL, transport=marketplace.transport())
    yield catalog, assets
    await catalog.close()
    await assets.close()

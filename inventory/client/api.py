"""
Async client for the inventory HTTP API.

Hides wire-format quirks behind the canonical ``Product`` shape: field
renames, numbers sent as strings, server-relative image paths and the
create/update responses that carry only an ID.
"""
from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import mimetypes
import os
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, BinaryIO, Mapping, Optional, Union
from urllib.parse import unquote, urlparse

import httpx
from pydantic import ValidationError as PydanticValidationError

from inventory.config import get_settings
from inventory.exceptions import (
    AuthError,
    InventoryError,
    NotFoundError,
    TransportError,
    ValidationError,
)
from inventory.client.models import Product, ProductDraft, WireProduct
from inventory.validation import validate_product

logger = logging.getLogger(__name__)

DEFAULT_STATUS = "Active"

# Draft field -> wire field
WIRE_FIELDS = {
    "name": "name",
    "description": "description",
    "price": "price",
    "stock": "stock",
    "sku": "productCode",
    "image_url": "image",
}

_FLOAT_PREFIX = re.compile(r"\s*[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?")
_INT_PREFIX = re.compile(r"\s*[-+]?\d+")

ImageSource = Union[bytes, bytearray, str, os.PathLike, BinaryIO]


def coerce_float(value: Any) -> float:
    """Lenient number parsing: a numeric prefix is used, anything else is 0."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        match = _FLOAT_PREFIX.match(value)
        if match:
            return float(match.group(0))
    if value not in (None, ""):
        logger.warning(f"Could not parse {value!r} as a number, using 0")
    return 0.0


def coerce_int(value: Any) -> int:
    """Lenient integer parsing, truncating like ``coerce_float``."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value)
    if isinstance(value, str):
        match = _INT_PREFIX.match(value)
        if match:
            return int(match.group(0))
    if value not in (None, ""):
        logger.warning(f"Could not parse {value!r} as an integer, using 0")
    return 0


def api_origin(base_url: str) -> str:
    """The API base URL without its trailing ``/api`` segment."""
    base = base_url.rstrip("/")
    if base.endswith("/api"):
        base = base[: -len("/api")]
    return base


def resolve_image_url(image: Optional[str], origin: str) -> str:
    """Absolute URLs pass through, server paths are joined to ``origin``."""
    if not image:
        return ""
    if image.startswith("http"):
        return image
    if not image.startswith("/"):
        image = f"/{image}"
    return f"{origin}{image}"


def relative_image_url(image: Optional[str], origin: str) -> Optional[str]:
    """Undo ``resolve_image_url`` for URLs on ``origin`` so the server sees its own path."""
    if image and image.startswith(f"{origin}/"):
        return image[len(origin):]
    return image


def to_product(row: Mapping[str, Any], origin: str) -> Product:
    """Convert a wire row into the canonical ``Product``."""
    wire = WireProduct.model_validate(row)
    timestamp = wire.last_update or datetime.now(timezone.utc).isoformat()

    return Product(
        id=str(wire.id),
        name=wire.name or "",
        description=wire.description or "",
        price=coerce_float(wire.price),
        stock=coerce_int(wire.stock),
        sku=wire.product_code or "",
        image_url=resolve_image_url(wire.image, origin),
        created_at=timestamp,
        updated_at=timestamp,
    )


def to_wire(data: Mapping[str, Any], origin: Optional[str] = None) -> dict:
    """Rename the draft fields present in ``data`` to their wire names."""
    payload = {wire: data[field] for field, wire in WIRE_FIELDS.items() if field in data}
    if origin and "image" in payload:
        payload["image"] = relative_image_url(payload["image"], origin)
    return payload


def _error_from_response(response: httpx.Response) -> InventoryError:
    """Build the typed error for a non-2xx response."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict) and body.get("error"):
        message = str(body["error"])
    else:
        message = f"HTTP {response.status_code}"

    status = response.status_code
    if status == 404:
        return NotFoundError(message)
    if status in (401, 403):
        return AuthError(message, status_code=status)
    if status in (400, 422):
        return ValidationError(message, status_code=status)
    return TransportError(message, status_code=status)


def _decode_data_uri(uri: str) -> tuple[str, bytes, str]:
    header, _, data = uri.partition(",")
    mimetype = header[len("data:"):].split(";")[0] or "image/jpeg"
    try:
        content = base64.b64decode(data) if ";base64" in header else unquote(data).encode()
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("Invalid data URI") from exc
    extension = mimetypes.guess_extension(mimetype) or ".jpg"
    return f"image{extension}", content, mimetype


class InventoryClient:
    """
    Client for the product, upload and auth endpoints.

    Pass ``client`` to reuse an existing ``httpx.AsyncClient`` (it is then
    left open on ``close``); otherwise one is created with the configured
    timeout.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: Optional[float] = None,
        token: Optional[str] = None,
    ) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.origin = api_origin(self.base_url)
        self.token = token

        if client is None:
            self._client = httpx.AsyncClient(timeout=timeout or settings.API_TIMEOUT)
            self._owns_client = True
        else:
            self._client = client
            self._owns_client = False

        logger.info(f"API client initialised (base_url={self.base_url}, owns_client={self._owns_client})")

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "InventoryClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _request(self, method: str, endpoint: str, **kwargs) -> Any:
        url = f"{self.base_url}{endpoint}"
        headers = dict(kwargs.pop("headers", None) or {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        logger.debug(f"API request {method} {url}")
        try:
            response = await self._client.request(method, url, headers=headers, **kwargs)
        except httpx.RequestError as exc:
            logger.error(f"API request failed ({method} {url}): {exc}")
            raise TransportError(f"Request failed: {exc}") from exc

        logger.debug(f"Response status {response.status_code} for {method} {url}")
        if response.is_error:
            error = _error_from_response(response)
            logger.error(f"API error ({method} {url}): {error.message}")
            raise error

        try:
            return response.json()
        except ValueError as exc:
            raise TransportError("Malformed response body", status_code=response.status_code) from exc

    def _to_product(self, row: Any) -> Product:
        if not isinstance(row, Mapping):
            raise TransportError("Malformed product payload")
        try:
            return to_product(row, self.origin)
        except PydanticValidationError as exc:
            raise TransportError("Malformed product payload") from exc

    async def list_products(self) -> list[Product]:
        """GET /products. A payload that isn't a list yields no products."""
        rows = await self._request("GET", "/products")
        if not isinstance(rows, list):
            logger.error(f"Product list response is not an array: {type(rows).__name__}")
            return []
        products = [self._to_product(row) for row in rows]
        logger.info(f"Loaded {len(products)} products")
        return products

    async def get_product(self, product_id: str) -> Product:
        """GET /products/{id}. Raises ``NotFoundError`` for unknown IDs."""
        row = await self._request("GET", f"/products/{product_id}")
        return self._to_product(row)

    async def create_product(self, data: ProductDraft | Mapping[str, Any]) -> Product:
        """
        Validate and create a product, then read it back.

        The create response holds only the new ID, so the stored row is
        fetched to return the canonical product.
        """
        errors = validate_product(data)
        if errors:
            raise ValidationError(errors[0].message, errors)

        payload = {
            "name": data.get("name"),
            "description": data.get("description") or "",
            "productCode": data.get("sku") or "",
            "image": relative_image_url(data.get("image_url"), self.origin) or "",
            "status": DEFAULT_STATUS,
        }
        for field in ("price", "stock"):
            if data.get(field) is not None:
                payload[field] = data[field]

        result = await self._request("POST", "/products", json=payload)
        product_id = result.get("productId") if isinstance(result, dict) else None
        if product_id is None:
            raise TransportError("Create response did not include a productId")

        return await self.get_product(str(product_id))

    async def update_product(self, product_id: str, data: ProductDraft | Mapping[str, Any]) -> Product:
        """Send only the fields present in ``data``, then read the row back."""
        errors = validate_product(data, partial=True)
        if errors:
            raise ValidationError(errors[0].message, errors)

        payload = to_wire(data, self.origin)
        payload["status"] = DEFAULT_STATUS

        await self._request("PUT", f"/products/{product_id}", json=payload)
        return await self.get_product(product_id)

    async def delete_product(self, product_id: str) -> None:
        await self._request("DELETE", f"/products/{product_id}")

    async def upload_image(self, source: ImageSource, filename: Optional[str] = None) -> str:
        """
        Upload an image as multipart ``file``.

        Args:
            source: In-memory content (``bytes``, a binary file object or a
                ``data:`` URI) or a path on the device (``str``,
                ``os.PathLike`` or a ``file://`` URI).
            filename: Name to send for in-memory content.

        Returns:
            The server-relative URL of the stored file, e.g.
            ``/uploads/images/photo_1700000000000-0a1b2c3d4e5f.jpg``.
        """
        if isinstance(source, (bytes, bytearray)):
            part = (filename or "image.jpg", bytes(source), "image/jpeg")
        elif isinstance(source, str) and source.startswith("data:"):
            part = _decode_data_uri(source)
        elif isinstance(source, (str, os.PathLike)):
            path = Path(source)
            if isinstance(source, str) and source.startswith("file://"):
                path = Path(unquote(urlparse(source).path))
            mimetype = mimetypes.guess_type(path.name)[0] or "image/jpeg"
            content = await asyncio.to_thread(path.read_bytes)
            part = (path.name or "image.jpg", content, mimetype)
        elif hasattr(source, "read"):
            name = filename or os.path.basename(getattr(source, "name", "") or "") or "image.jpg"
            mimetype = mimetypes.guess_type(name)[0] or "image/jpeg"
            part = (name, source.read(), mimetype)
        else:
            raise TypeError(f"Unsupported image source: {type(source).__name__}")

        result = await self._request("POST", "/upload", files={"file": part})
        try:
            url = result["file"]["url"]
        except (KeyError, TypeError) as exc:
            raise TransportError("Upload response did not include a file URL") from exc

        logger.info(f"Uploaded {part[0]} -> {url}")
        return url

    def image_url(self, path: Optional[str]) -> str:
        """Absolute form of a URL returned by ``upload_image``."""
        return resolve_image_url(path, self.origin)

    async def login(self, username: str, password: str) -> dict:
        """Log in and use the returned token for later requests."""
        result = await self._request(
            "POST", "/auth/login", json={"username": username, "password": password}
        )
        self.token = result["token"]
        return result

    async def ping(self) -> dict:
        return await self._request("GET", "/ping")

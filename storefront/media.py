# storefront/media.py
"""
Медиа-шлюз: пересылает загруженные изображения на медиа-хост (Cloudinary)
и возвращает постоянный URL сохранённого изображения.
"""

import hashlib
import logging
import time
import uuid
from typing import Dict, Optional, Protocol

import httpx
from fastapi import Request

from storefront.config import Settings
from storefront.errors import UpstreamError

logger = logging.getLogger(__name__)

CLOUDINARY_API_URL = "https://api.cloudinary.com/v1_1"


class MediaGateway(Protocol):
    async def upload(self, image: str) -> str:
        ...

    async def aclose(self) -> None:
        ...


def sign_params(params: Dict[str, str], api_secret: str) -> str:
    """Подпись Cloudinary: sha1 от отсортированных пар ``k=v``, склеенных через ``&``, плюс секрет."""
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode()).hexdigest()


class CloudinaryMediaGateway:
    """Подписанная загрузка через REST API Cloudinary."""

    def __init__(self, cloud_name: str, api_key: str, api_secret: str, folder: str,
                 timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self._client = httpx.AsyncClient(
            base_url=f"{CLOUDINARY_API_URL}/{cloud_name}",
            timeout=timeout,
            transport=transport,
        )

    async def upload(self, image: str) -> str:
        # Параметры file и api_key в подпись не входят
        params = {"folder": self.folder, "timestamp": str(int(time.time()))}
        data = {
            **params,
            "file": image,
            "api_key": self.api_key,
            "signature": sign_params(params, self.api_secret),
        }
        try:
            response = await self._client.post("/image/upload", data=data)
            response.raise_for_status()
            return response.json()["secure_url"]
        except (httpx.HTTPError, KeyError, ValueError) as e:
            raise UpstreamError(f"Media host upload failed: {e}") from e

    async def aclose(self) -> None:
        await self._client.aclose()


class InMemoryMediaGateway:
    """Заглушка, когда ключи медиа-хоста не заданы (локальная разработка, тесты)."""

    def __init__(self, base_url: str = "https://media.example.test", folder: str = "ecommerce_images"):
        self.base_url = base_url
        self.folder = folder
        self.stored: Dict[str, str] = {}

    async def upload(self, image: str) -> str:
        url = f"{self.base_url}/{self.folder}/{uuid.uuid4().hex}"
        self.stored[url] = image
        return url

    def get_image(self, url: str) -> str:
        image = self.stored.get(url)
        if image is None:
            raise FileNotFoundError(url)
        return image

    def reset(self) -> None:
        self.stored.clear()

    async def aclose(self) -> None:
        self.reset()


def create_media_gateway(settings: Settings) -> MediaGateway:
    if not settings.media_configured:
        logger.warning("Media host credentials are not set, using in-memory media gateway")
        return InMemoryMediaGateway(folder=settings.media_folder)
    return CloudinaryMediaGateway(
        cloud_name=settings.cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
        folder=settings.media_folder,
        timeout=settings.media_timeout,
    )


def get_media_gateway(request: Request) -> MediaGateway:
    return request.app.state.media_gateway

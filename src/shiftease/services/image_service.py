"""Image search backed by the Pexels API.

Errors are reported in the result rather than raised, so the event-image
picker can show a message and keep working.
"""

import logging
from typing import Dict, List, Optional

import httpx
from aiocache import Cache

from shiftease.config import config

logger = logging.getLogger(__name__)

PEXELS_SEARCH_URL = "https://api.pexels.com/v1/search"
REQUEST_TIMEOUT = 15.0
DEFAULT_PER_PAGE = 24
CACHE_TTL = 3600


def _empty(page: int, error: Optional[str] = None) -> Dict:
    result = {"items": [], "page": page, "total": 0}
    if error:
        result["error"] = error
    return result


def normalize_photos(data: Dict) -> List[Dict]:
    """Map Pexels photos to picker items, dropping photos without a usable URL"""
    photos = data.get("photos") if isinstance(data, dict) else None
    if not isinstance(photos, list):
        return []

    items = []
    for photo in photos:
        src = photo.get("src") or {}
        url = src.get("large") or src.get("medium") or src.get("small")
        if not url:
            continue
        items.append(
            {
                "id": photo.get("id"),
                "alt": photo.get("alt") or "photo",
                "url": url,
                "thumb": src.get("tiny") or src.get("small") or src.get("medium"),
                "author": photo.get("photographer") or "",
                "link": photo.get("url") or "",
            }
        )
    return items


class ImageService:
    """Pexels client with an in-memory cache of successful searches"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        cache: Optional[Cache] = None,
    ):
        self.api_key = api_key if api_key is not None else config["pexels_api_key"]
        self.transport = transport
        self.cache = cache if cache is not None else Cache(Cache.MEMORY, ttl=CACHE_TTL)

    async def _get(self, params: Dict) -> httpx.Response:
        async with httpx.AsyncClient(
            transport=self.transport, timeout=REQUEST_TIMEOUT
        ) as client:
            return await client.get(
                PEXELS_SEARCH_URL,
                params=params,
                headers={"Authorization": self.api_key},
            )

    async def search(
        self, query: str, page: int = 1, per_page: int = DEFAULT_PER_PAGE
    ) -> Dict:
        """
        Search landscape photos for a query

        Returns:
            {"items": [...], "page": int, "total": int, "error"?: str}
        """
        q = (query or "").strip()
        if not q:
            return _empty(1)

        if not self.api_key:
            logger.warning("PEXELS_API_KEY is not set; image search disabled")
            return _empty(1, "missing_key")

        cache_key = f"search:{q}:{page}:{per_page}"
        cached = await self.cache.get(cache_key)
        if cached is not None:
            return cached

        params = {
            "query": q,
            "per_page": per_page,
            "page": page,
            "orientation": "landscape",
        }
        try:
            response = await self._get(params)
        except httpx.TimeoutException as e:
            logger.error(f"Pexels request timed out: {e}")
            return _empty(page, "timeout")
        except httpx.HTTPError as e:
            logger.error(f"Pexels request failed: {e}")
            return _empty(page, "request_failed")

        if response.status_code != 200:
            logger.error(f"Pexels non-OK: {response.status_code} {response.text}")
            return _empty(page, f"http_{response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Pexels JSON parse error: {e}")
            return _empty(page, "bad_json")
        if not isinstance(data, dict):
            return _empty(page, "bad_json")

        result = {
            "items": normalize_photos(data),
            "page": page,
            "total": data.get("total_results") or 0,
        }
        await self.cache.set(cache_key, result)
        return result

    async def fetch_one(self, query: str) -> Optional[Dict]:
        """
        Fetch a single image for a query

        Returns:
            {"url", "attribution", "provider"} or None
        """
        q = (query or "").strip()
        if not q:
            return None

        if not self.api_key:
            logger.warning("PEXELS_API_KEY is not set; single image fetch disabled")
            return None

        params = {"query": q, "per_page": 1, "orientation": "landscape"}
        try:
            response = await self._get(params)
        except httpx.HTTPError as e:
            logger.error(f"Pexels single fetch failed: {e}")
            return None

        if response.status_code != 200:
            logger.error(f"Pexels single non-OK: {response.status_code}")
            return None

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Pexels single JSON parse error: {e}")
            return None
        if not isinstance(data, dict):
            return None

        photos = data.get("photos") or []
        if not photos:
            return None
        photo = photos[0]
        url = (photo.get("src") or {}).get("large")
        if not url:
            return None

        return {
            "url": url,
            "attribution": f"{photo.get('photographer')} (Pexels)",
            "provider": "pexels",
        }


_image_service: Optional[ImageService] = None


def get_image_service() -> ImageService:
    """Shared instance so the search cache survives across requests"""
    global _image_service
    if _image_service is None:
        _image_service = ImageService()
    return _image_service

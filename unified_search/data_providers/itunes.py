from __future__ import annotations

import asyncio
from typing import Any

import httpx

from unified_search.config import Settings, settings as default_settings
from unified_search.data_providers.base import HttpCatalogAdapter, year_from_date
from unified_search.schemas import CatalogItem


class ITunesClient(HttpCatalogAdapter):
    """Albums and singles from the iTunes Search API.

    The API exposes no rating, so items carry ``rating=None`` and rank with a
    neutral popularity.
    """

    BASE_URL = "https://itunes.apple.com/search"
    catalog = "music"

    def __init__(self, settings: Settings = default_settings) -> None:
        super().__init__(timeout=settings.request_timeout_seconds)
        self.country = settings.itunes_country or "US"

    def name(self) -> str:
        return "iTunes"

    async def search(self, query: str, max_results: int) -> list[CatalogItem]:
        self.last_error = ""
        if not query.strip():
            return []

        per_entity = max(1, max_results // 2)
        async with self._client() as client:
            albums, tracks = await asyncio.gather(
                self._search_entity(client, query.strip(), "album", per_entity),
                self._search_entity(client, query.strip(), "song", per_entity),
            )

        items = [self._album_to_item(a) for a in albums if a.get("wrapperType") == "collection"]
        items += [self._track_to_item(t) for t in tracks if t.get("wrapperType") == "track" and t.get("kind") == "song"]
        return items[:max_results]

    async def _search_entity(self, client: httpx.AsyncClient, term: str, entity: str, limit: int) -> list[dict[str, Any]]:
        params = {
            "term": term,
            "media": "music",
            "entity": entity,
            "limit": str(limit),
            "country": self.country,
        }
        data = await self._get_json(client, self.BASE_URL, params)
        return [r for r in data.get("results", []) or [] if isinstance(r, dict)]

    @staticmethod
    def _album_to_item(album: dict[str, Any]) -> CatalogItem:
        return CatalogItem(
            id=f"album-{album.get('collectionId', '')}",
            title=str(album.get("collectionName") or "Untitled Album"),
            catalog="music",
            year=year_from_date(album.get("releaseDate")),
            image=_best_artwork(album),
            raw={
                "type": "album",
                "artist": album.get("artistName", ""),
                "genre": album.get("primaryGenreName", ""),
                "track_count": album.get("trackCount"),
            },
        )

    @staticmethod
    def _track_to_item(track: dict[str, Any]) -> CatalogItem:
        return CatalogItem(
            id=f"track-{track.get('trackId', '')}",
            title=str(track.get("trackName") or "Untitled Track"),
            catalog="music",
            year=year_from_date(track.get("releaseDate")),
            image=_best_artwork(track),
            raw={
                "type": "single",
                "artist": track.get("artistName", ""),
                "album_id": f"album-{track.get('collectionId', '')}",
                "album_title": track.get("collectionName", ""),
                "duration_ms": track.get("trackTimeMillis"),
            },
        )


def _best_artwork(entry: dict[str, Any]) -> str:
    for key in ("artworkUrl100", "artworkUrl60", "artworkUrl30"):
        url = entry.get(key)
        if url:
            # iTunes serves any square size when the path suffix is rewritten.
            return str(url).replace("100x100bb", "600x600bb")
    return ""

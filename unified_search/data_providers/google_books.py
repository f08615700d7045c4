from __future__ import annotations

from typing import Any

from unified_search.config import Settings, settings as default_settings
from unified_search.data_providers.base import HttpCatalogAdapter, to_float, year_from_date
from unified_search.schemas import CatalogItem


class GoogleBooksClient(HttpCatalogAdapter):
    BASE_URL = "https://www.googleapis.com/books/v1/volumes"
    MAX_PAGE_SIZE = 40
    catalog = "book"

    def __init__(self, settings: Settings = default_settings) -> None:
        super().__init__(timeout=settings.request_timeout_seconds)
        self.api_key = settings.google_books_api_key.strip()

    def name(self) -> str:
        return "Google Books"

    async def search(self, query: str, max_results: int) -> list[CatalogItem]:
        self.last_error = ""
        if not query.strip():
            return []

        params = {
            "q": query.strip(),
            "maxResults": str(max(1, min(max_results, self.MAX_PAGE_SIZE))),
            "printType": "books",
            "orderBy": "relevance",
        }
        # The volumes endpoint works anonymously; a key only lifts the quota.
        if self.api_key:
            params["key"] = self.api_key

        async with self._client() as client:
            data = await self._get_json(client, self.BASE_URL, params)

        volumes = data.get("items", []) or []
        return [
            self._to_item(volume)
            for volume in volumes
            if volume.get("id") and (volume.get("volumeInfo") or {}).get("title")
        ]

    @staticmethod
    def _to_item(volume: dict[str, Any]) -> CatalogItem:
        info = volume.get("volumeInfo", {}) or {}
        rating = to_float(info.get("averageRating"))
        links = info.get("imageLinks", {}) or {}
        image = str(links.get("thumbnail") or links.get("smallThumbnail") or "")
        authors = info.get("authors") or []
        return CatalogItem(
            id=f"book-{volume['id']}",
            title=str(info["title"]),
            catalog="book",
            year=year_from_date(info.get("publishedDate")),
            rating=min(10.0, rating * 2) if rating is not None else None,
            image=image.replace("http://", "https://"),
            raw={
                "author": authors[0] if authors else "",
                "publisher": info.get("publisher", ""),
                "page_count": info.get("pageCount"),
                "ratings_count": info.get("ratingsCount"),
            },
        )

from __future__ import annotations

from typing import Any

from unified_search.config import Settings, settings as default_settings
from unified_search.data_providers.base import AdapterError, HttpCatalogAdapter, year_from_date
from unified_search.schemas import CatalogItem


class OMDbClient(HttpCatalogAdapter):
    BASE_URL = "https://www.omdbapi.com/"
    catalog = "film"

    def __init__(self, settings: Settings = default_settings) -> None:
        super().__init__(timeout=settings.request_timeout_seconds)
        self.api_key = settings.omdb_api_key.strip()

    def name(self) -> str:
        return "OMDb"

    async def search(self, query: str, max_results: int) -> list[CatalogItem]:
        self.last_error = ""
        if not query.strip():
            return []
        if not self.api_key:
            self.last_error = "OMDb API key not configured."
            raise AdapterError(self.last_error)

        params = {"apikey": self.api_key, "s": query.strip(), "page": "1"}
        async with self._client() as client:
            data = await self._get_json(client, self.BASE_URL, params)

        if str(data.get("Response", "True")).lower() == "false":
            error = str(data.get("Error", ""))
            # OMDb answers 200 with Response=False for an empty result set.
            if "not found" in error.lower():
                return []
            self.last_error = f"OMDb error: {error or 'unknown'}"
            raise AdapterError(self.last_error)

        seen: set[str] = set()
        items: list[CatalogItem] = []
        for entry in data.get("Search", []) or []:
            imdb_id = str(entry.get("imdbID", ""))
            if not imdb_id or imdb_id in seen or not entry.get("Title"):
                continue
            seen.add(imdb_id)
            items.append(self._to_item(entry))
        return items[:max_results]

    @staticmethod
    def _to_item(entry: dict[str, Any]) -> CatalogItem:
        poster = str(entry.get("Poster", "") or "")
        return CatalogItem(
            id=f"movie-{entry['imdbID']}",
            title=str(entry["Title"]),
            catalog="film",
            year=year_from_date(entry.get("Year")),
            image="" if poster == "N/A" else poster,
            raw={"type": entry.get("Type", ""), "imdb_id": entry["imdbID"]},
        )

from __future__ import annotations

from typing import Any

from unified_search.config import Settings, settings as default_settings
from unified_search.data_providers.base import AdapterError, HttpCatalogAdapter, to_float, year_from_date
from unified_search.schemas import CatalogItem


class RAWGClient(HttpCatalogAdapter):
    BASE_URL = "https://api.rawg.io/api/games"
    catalog = "game"

    def __init__(self, settings: Settings = default_settings) -> None:
        super().__init__(timeout=settings.request_timeout_seconds)
        self.api_key = settings.rawg_api_key.strip()

    def name(self) -> str:
        return "RAWG"

    async def search(self, query: str, max_results: int) -> list[CatalogItem]:
        self.last_error = ""
        if not query.strip():
            return []
        if not self.api_key:
            self.last_error = "RAWG API key not configured."
            raise AdapterError(self.last_error)

        params = {"key": self.api_key, "search": query.strip(), "page_size": str(max_results)}
        async with self._client() as client:
            data = await self._get_json(client, self.BASE_URL, params)

        games = data.get("results", []) or []
        return [self._to_item(game) for game in games if game.get("id") is not None and game.get("name")]

    @staticmethod
    def _to_item(game: dict[str, Any]) -> CatalogItem:
        rating = to_float(game.get("rating"))
        # RAWG reports 0 for unrated games.
        normalized = min(10.0, rating * 2) if rating else None
        return CatalogItem(
            id=f"game-{game['id']}",
            title=str(game["name"]),
            catalog="game",
            year=year_from_date(game.get("released")),
            rating=normalized,
            image=str(game.get("background_image") or ""),
            raw={
                "metacritic": game.get("metacritic"),
                "ratings_count": game.get("ratings_count"),
                "genres": [g.get("name", "") for g in game.get("genres", []) or []],
            },
        )

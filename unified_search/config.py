import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parent.parent
load_dotenv(ROOT_DIR / ".env")


def _as_bool(value: str, default: bool = False) -> bool:
    if value is None:
        return default
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    omdb_api_key: str = os.getenv("OMDB_API_KEY", "")
    google_books_api_key: str = os.getenv("GOOGLE_BOOKS_API_KEY", "")
    rawg_api_key: str = os.getenv("RAWG_API_KEY", "")
    itunes_country: str = os.getenv("ITUNES_COUNTRY", "US")
    adapter_max_results: int = int(os.getenv("ADAPTER_MAX_RESULTS", "20"))
    request_timeout_seconds: int = int(os.getenv("REQUEST_TIMEOUT_SECONDS", "12"))
    # Per-catalog deadlines, tuned to each upstream's observed latency.
    film_timeout_seconds: float = float(os.getenv("FILM_TIMEOUT_SECONDS", "2.0"))
    book_timeout_seconds: float = float(os.getenv("BOOK_TIMEOUT_SECONDS", "2.5"))
    game_timeout_seconds: float = float(os.getenv("GAME_TIMEOUT_SECONDS", "2.0"))
    music_timeout_seconds: float = float(os.getenv("MUSIC_TIMEOUT_SECONDS", "1.5"))
    cache_ttl_seconds: float = float(os.getenv("CACHE_TTL_SECONDS", "600"))
    cache_max_size: int = int(os.getenv("CACHE_MAX_SIZE", "1000"))
    cache_cleanup_interval_seconds: float = float(os.getenv("CACHE_CLEANUP_INTERVAL_SECONDS", "300"))
    debounce_short_ms: int = int(os.getenv("DEBOUNCE_SHORT_MS", "500"))
    debounce_medium_ms: int = int(os.getenv("DEBOUNCE_MEDIUM_MS", "300"))
    debounce_long_ms: int = int(os.getenv("DEBOUNCE_LONG_MS", "200"))
    min_query_length: int = int(os.getenv("MIN_QUERY_LENGTH", "2"))
    diversity_top_results: int = int(os.getenv("DIVERSITY_TOP_RESULTS", "12"))
    diversity_max_per_catalog: int = int(os.getenv("DIVERSITY_MAX_PER_CATALOG", "3"))
    diversity_total_display: int = int(os.getenv("DIVERSITY_TOTAL_DISPLAY", "50"))
    popular_queries_table_size: int = int(os.getenv("POPULAR_QUERIES_TABLE_SIZE", "500"))
    debug_log: bool = _as_bool(os.getenv("DEBUG_LOG", "0"))
    gradio_server_name: str = os.getenv("GRADIO_SERVER_NAME", "0.0.0.0")
    gradio_server_port: int = int(os.getenv("GRADIO_SERVER_PORT", "7860"))

    def catalog_timeouts(self) -> dict[str, float]:
        return {
            "film": self.film_timeout_seconds,
            "book": self.book_timeout_seconds,
            "game": self.game_timeout_seconds,
            "music": self.music_timeout_seconds,
        }


settings = Settings()

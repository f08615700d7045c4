import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from unified_search.config import settings
from unified_search.schemas import SearchOptions
from unified_search.services.search_service import SearchService


async def main() -> None:
    async with SearchService.from_settings(settings) as service:
        for term in ["dune", "the last of us", "abbey road", "dune"]:
            response = await service.search(term, SearchOptions(debounce=False, limit=12))
            print(
                f"query={term} results={response.total_count} "
                f"time_ms={response.response_time_ms} from_cache={response.from_cache}"
            )
            for r in response.results[:5]:
                print(f"{r.rank}. [{r.catalog}] {r.title} ({r.year or 'n/a'}) score={r.final_score}")
            print("---")
        print(service.get_metrics().model_dump_json(indent=2))


if __name__ == "__main__":
    asyncio.run(main())

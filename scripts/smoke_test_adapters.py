import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from unified_search.config import settings
from unified_search.data_providers.base import AdapterError
from unified_search.data_providers.google_books import GoogleBooksClient
from unified_search.data_providers.itunes import ITunesClient
from unified_search.data_providers.omdb import OMDbClient
from unified_search.data_providers.rawg import RAWGClient


async def main() -> None:
    adapters = [OMDbClient(settings), GoogleBooksClient(settings), RAWGClient(settings), ITunesClient(settings)]
    for adapter in adapters:
        for term in ["dune", "zelda"]:
            try:
                items = await adapter.search(term, 5)
            except AdapterError as exc:
                print(f"{adapter.name()} query={term} error={exc}")
                continue
            print(f"{adapter.name()} query={term} items={len(items)} status={adapter.last_status}")
            for item in items[:2]:
                print(f"- {item.title} | year={item.year} | rating={item.rating}")
        print("---")


if __name__ == "__main__":
    asyncio.run(main())

import sys

import gradio as gr
from loguru import logger

from unified_search.config import settings
from unified_search.schemas import ALL_CATALOGS, SearchOptions
from unified_search.services.search_service import SearchService

logger.remove()
logger.add(sys.stderr, level="DEBUG" if settings.debug_log else "INFO")

service = SearchService.from_settings(settings)

RESULT_HEADERS = ["#", "Title", "Catalog", "Year", "Rating", "Score"]
CATALOG_LABELS = {"film": "Films & TV", "book": "Books", "game": "Games", "music": "Music"}


def session_debounce_key(request: gr.Request | None) -> str:
    # One visitor's keystrokes must not supersede another's search.
    session = getattr(request, "session_hash", None) or "local"
    return f"search-box:{session}"


async def search_fn(query: str, catalogs: list[str], request: gr.Request) -> tuple[list[list], str]:
    selected = frozenset(c for c in catalogs if c in ALL_CATALOGS) or frozenset(ALL_CATALOGS)
    response = await service.search(
        query,
        SearchOptions(categories=selected, debounce_key=session_debounce_key(request)),
    )
    if response.superseded:
        # A newer keystroke owns the table now.
        return gr.skip(), gr.skip()
    rows = [
        [
            r.rank,
            r.title,
            CATALOG_LABELS.get(r.catalog, r.catalog),
            r.year or "",
            f"{r.rating:.1f}" if r.rating is not None else "",
            f"{r.final_score:.2f}",
        ]
        for r in response.results
    ]
    source = "cache" if response.from_cache else "live"
    status = f"{response.total_count} results in {response.response_time_ms:.0f} ms ({source})"
    return rows, status


def metrics_fn() -> str:
    snapshot = service.get_metrics()
    lines = [
        f"- Searches: {snapshot.searches}",
        f"- Average response time: {snapshot.average_response_time_ms:.0f} ms",
        f"- Cache hit rate: {snapshot.cache_hit_rate:.0%} ({snapshot.cache_hits} hits / {snapshot.cache_misses} misses)",
        "- Catalog failures: "
        + (", ".join(f"{k}={v}" for k, v in sorted(snapshot.adapter_failures.items())) or "none"),
        "- Popular queries: " + (", ".join(f"{q} ({n})" for q, n in snapshot.popular_queries) or "none"),
    ]
    return "\n".join(lines)


def clear_cache_fn() -> str:
    service.clear_cache()
    return metrics_fn()


def build_demo() -> gr.Blocks:
    with gr.Blocks(title="Unified Search") as demo:
        gr.Markdown(
            """
            # Unified Search
            One search box for films & TV, books, games and music, ranked in a single list.
            """
        )
        query = gr.Textbox(label="Search", placeholder="Try: dune, zelda, abbey road")
        catalogs = gr.CheckboxGroup(
            choices=[(label, tag) for tag, label in CATALOG_LABELS.items()],
            value=list(ALL_CATALOGS),
            label="Catalogs",
        )
        status = gr.Markdown()
        table = gr.Dataframe(headers=RESULT_HEADERS, interactive=False, wrap=True)
        with gr.Accordion("Metrics", open=False):
            metrics = gr.Markdown(metrics_fn())
            with gr.Row():
                refresh = gr.Button("Refresh")
                clear = gr.Button("Clear cache")

        query.change(search_fn, inputs=[query, catalogs], outputs=[table, status])
        catalogs.change(search_fn, inputs=[query, catalogs], outputs=[table, status])
        refresh.click(metrics_fn, outputs=metrics)
        clear.click(clear_cache_fn, outputs=metrics)
    return demo


if __name__ == "__main__":
    app = build_demo()
    app.launch(server_name=settings.gradio_server_name, server_port=settings.gradio_server_port)

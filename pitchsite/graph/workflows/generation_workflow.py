"""
Microsite generation LangGraph workflow.
URL in, stored microsite out; upstream failures degrade instead of failing.
"""

from typing import Any, Dict, Optional

import structlog
from langgraph.graph import StateGraph, END

from ...models.schemas import new_record_id
from ...services.composer import ContentComposer
from ...services.fetcher import WebsiteFetcher
from ...services.storage import RecordStore
from ..nodes.generation_nodes import (
    node_initialize,
    node_fetch,
    route_after_fetch,
    node_extract,
    node_fallback_profile,
    node_compose,
    node_persist,
)

logger = structlog.get_logger()


async def create_generation_workflow(
    store: RecordStore,
    fetcher: Optional[WebsiteFetcher] = None,
    composer: Optional[ContentComposer] = None
):
    """
    Create and compile the generation workflow.

    Workflow steps:
    1. Initialize
    2. Fetch the site
    3. Extract a profile (or build a host-only fallback profile)
    4. Compose content
    5. Persist the microsite

    Args:
        store: Record store microsites are written to
        fetcher: Website fetcher (default: configured WebsiteFetcher)
        composer: Content composer (default: ContentComposer)

    Returns:
        Compiled workflow
    """
    logger.info("creating_generation_workflow")

    fetcher = fetcher or WebsiteFetcher()
    composer = composer or ContentComposer()

    async def fetch(state: Dict[str, Any]) -> Dict[str, Any]:
        return await node_fetch(state, fetcher)

    async def compose(state: Dict[str, Any]) -> Dict[str, Any]:
        return await node_compose(state, store, composer)

    async def persist(state: Dict[str, Any]) -> Dict[str, Any]:
        return await node_persist(state, store)

    workflow = StateGraph(dict)

    workflow.add_node("initialize", node_initialize)
    workflow.add_node("fetch", fetch)
    workflow.add_node("extract", node_extract)
    workflow.add_node("fallback_profile", node_fallback_profile)
    workflow.add_node("compose", compose)
    workflow.add_node("persist", persist)

    workflow.set_entry_point("initialize")
    workflow.add_edge("initialize", "fetch")

    workflow.add_conditional_edges(
        "fetch",
        route_after_fetch,
        {
            "extract": "extract",
            "fallback_profile": "fallback_profile"
        }
    )

    workflow.add_edge("extract", "compose")
    workflow.add_edge("fallback_profile", "compose")
    workflow.add_edge("compose", "persist")
    workflow.add_edge("persist", END)

    # One-shot runs; nothing is checkpointed
    compiled = workflow.compile()

    logger.info("generation_workflow_created")

    return compiled


async def run_generation(workflow, url: str) -> Dict[str, Any]:
    """
    Run one generation for an already-normalized URL.

    Returns:
        Final workflow state (microsite_id, slug, content_source, steps, ...)
    """
    return await workflow.ainvoke({"workflow_id": new_record_id(), "url": url})

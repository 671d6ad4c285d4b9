"""
Microsite generation nodes: fetch, extract, compose and persist.

State is a plain dict. Profiles and content are kept as JSON-mode dicts.
"""

import asyncio
from typing import Any, Dict

import structlog

from ...models.schemas import (
    CompanyProfile,
    MicrositeCreate,
    MicrositeStatus,
    PersonalizedContent,
    StepStatus,
    utc_now,
)
from ...services.composer import ContentComposer
from ...services.extractor import extract_company_profile, fallback_profile
from ...services.fetcher import WebsiteFetcher, host_of
from ...services.storage import RecordStore

logger = structlog.get_logger()

STEP_NAMES = ["initialize", "fetch", "extract", "compose", "persist"]


def _steps(state: Dict[str, Any], **updates: StepStatus) -> Dict[str, StepStatus]:
    return {**state.get("steps", {}), **updates}


async def node_initialize(state: Dict[str, Any]) -> Dict[str, Any]:
    """
    Initialize workflow state.

    Args:
        state: Must contain workflow_id and a normalized url

    Returns:
        State with every step pending except initialize
    """
    logger.info("node_initialize", workflow_id=state.get("workflow_id"), url=state.get("url"))

    steps = {name: StepStatus.PENDING for name in STEP_NAMES}
    steps["initialize"] = StepStatus.COMPLETED

    return {
        **state,
        "host": host_of(state["url"]),
        "steps": steps,
    }


async def node_fetch(state: Dict[str, Any], fetcher: WebsiteFetcher) -> Dict[str, Any]:
    """Fetch the target site. A failed fetch is recorded, never raised."""
    result = await fetcher.fetch(state["url"])

    logger.info(
        "node_fetch",
        workflow_id=state.get("workflow_id"),
        success=result.success,
        status_code=result.status_code,
        error=result.error
    )

    return {
        **state,
        "fetch_success": result.success,
        "html": result.html if result.success else None,
        "host": result.host or state.get("host"),
        "final_url": result.final_url,
        "fetch_error": result.error,
        "steps": _steps(state, fetch=StepStatus.COMPLETED if result.success else StepStatus.FAILED),
    }


def route_after_fetch(state: Dict[str, Any]) -> str:
    """
    Conditional edge: sites that couldn't be fetched get a host-only profile.

    Returns:
        Next node name
    """
    if state.get("fetch_success") and state.get("html"):
        return "extract"
    logger.info("fetch_failed_routing_to_fallback", host=state.get("host"))
    return "fallback_profile"


async def node_extract(state: Dict[str, Any]) -> Dict[str, Any]:
    """Derive the company profile from fetched HTML."""
    try:
        profile = extract_company_profile(state["html"], state["host"])
        status = StepStatus.COMPLETED
    except Exception as e:
        logger.warning("extraction_failed", host=state.get("host"), error=str(e))
        profile = fallback_profile(state["host"])
        status = StepStatus.FAILED

    return {
        **state,
        "html": None,
        "profile": profile.model_dump(mode="json"),
        "steps": _steps(state, extract=status),
    }


async def node_fallback_profile(state: Dict[str, Any]) -> Dict[str, Any]:
    """Host-only profile for sites that couldn't be fetched."""
    profile = fallback_profile(state["host"])
    logger.info("fallback_profile_used", host=state["host"], name=profile.name)

    return {
        **state,
        "html": None,
        "profile": profile.model_dump(mode="json"),
        "steps": _steps(state, extract=StepStatus.FAILED),
    }


async def node_compose(
    state: Dict[str, Any],
    store: RecordStore,
    composer: ContentComposer
) -> Dict[str, Any]:
    """Compose copy; the blocking LLM call runs in a worker thread."""
    profile = CompanyProfile.model_validate(state["profile"])
    api_key = store.get_settings().openai_api_key

    content = await asyncio.to_thread(composer.compose, profile, api_key)

    return {
        **state,
        "content": content.model_dump(mode="json"),
        "content_source": content.content_source.value,
        "steps": _steps(state, compose=StepStatus.COMPLETED),
    }


async def node_persist(state: Dict[str, Any], store: RecordStore) -> Dict[str, Any]:
    """Store the generated microsite as published."""
    profile = CompanyProfile.model_validate(state["profile"])
    content = PersonalizedContent.model_validate(state["content"])

    microsite = store.create_microsite(MicrositeCreate(
        target_company_name=profile.name,
        target_company_url=state["url"],
        target_industry=profile.industry.value,
        target_company_size=profile.company_size.value,
        company_description=profile.description,
        logo_url=profile.logo_url,
        tech_stack=profile.tech_stack,
        pain_points=profile.pain_points,
        company_metadata=profile.metadata,
        headline=content.headline,
        subheadline=content.subheadline,
        value_propositions=content.value_propositions,
        recommended_solutions=content.recommended_solutions,
        custom_pitch=content.custom_pitch,
        cta=content.cta,
        content_source=content.content_source,
        status=MicrositeStatus.PUBLISHED,
        published_at=utc_now(),
    ))

    logger.info(
        "node_persist",
        workflow_id=state.get("workflow_id"),
        microsite_id=microsite.id,
        slug=microsite.slug
    )

    return {
        **state,
        "microsite_id": microsite.id,
        "slug": microsite.slug,
        "steps": _steps(state, persist=StepStatus.COMPLETED),
    }

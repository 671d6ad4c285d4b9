"""
API endpoints for microsite generation, serving, tracking and analytics.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address
import structlog

from ..core.config import settings
from ..graph.workflows.generation_workflow import create_generation_workflow, run_generation
from ..models.schemas import (
    AnalyticsSummary,
    Campaign,
    CampaignCreate,
    CampaignSummary,
    CompanyMatch,
    ContentSource,
    CustomerReference,
    GenerateRequest,
    GenerateResponse,
    Lead,
    LeadCreate,
    Microsite,
    MicrositeDetail,
    MicrositeStats,
    MicrositeStatus,
    MicrositeUpdate,
    SettingsResponse,
    SettingsUpdate,
    TrackRequest,
    new_record_id,
)
from ..services.companies import DEFAULT_LIMIT, search_companies
from ..services.fetcher import normalize_url
from ..services.social_proof import DEFAULT_COUNT, select_customers
from ..services.storage import RecordStore, create_store
from ..utils import conversion_rate

logger = structlog.get_logger()
router = APIRouter()
limiter = Limiter(key_func=get_remote_address)

RECENT_VISITS_LIMIT = 10


# === Dependencies ===

def get_store(request: Request) -> RecordStore:
    """Store shared by the app, created on first use."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        store = create_store()
        request.app.state.store = store
    return store


async def get_generation_workflow(request: Request, store: RecordStore = Depends(get_store)):
    """Compiled generation workflow, created on first use."""
    workflow = getattr(request.app.state, "generation_workflow", None)
    if workflow is None:
        workflow = await create_generation_workflow(
            store,
            fetcher=getattr(request.app.state, "fetcher", None),
            composer=getattr(request.app.state, "composer", None)
        )
        request.app.state.generation_workflow = workflow
    return workflow


def _microsite_or_404(store: RecordStore, microsite_id: str) -> Microsite:
    microsite = store.get_microsite_by_id(microsite_id)
    if microsite is None:
        raise HTTPException(status_code=404, detail="Microsite not found")
    return microsite


def client_ip(request: Request) -> Optional[str]:
    """Originating client address, preferring proxy headers over the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else None


# === Generation ===

@router.post("/generate", response_model=GenerateResponse)
@limiter.limit(f"{settings.RATE_LIMIT_PER_HOUR}/hour")
async def generate_microsite(
    request: Request,
    body: GenerateRequest,
    workflow=Depends(get_generation_workflow)
):
    """
    Scrape a company website and create a personalized microsite.

    Unreachable sites still produce a microsite from a host-only profile.
    A malformed URL is rejected with 400 before anything is stored.
    """
    url = normalize_url(body.url)
    logger.info("generate_requested", url=url)

    final_state = await run_generation(workflow, url)

    slug = final_state["slug"]
    return GenerateResponse(
        microsite_id=final_state["microsite_id"],
        slug=slug,
        url=f"{settings.APP_URL.rstrip('/')}/m/{slug}",
        content_source=ContentSource(final_state["content_source"]),
    )


# === Microsites ===

@router.get("/microsites", response_model=List[Microsite])
async def list_microsites(
    status: Optional[MicrositeStatus] = None,
    campaign_id: Optional[str] = None,
    store: RecordStore = Depends(get_store)
):
    return store.list_microsites(status, campaign_id=campaign_id)


@router.get("/microsites/{microsite_id}", response_model=MicrositeDetail)
async def get_microsite(microsite_id: str, store: RecordStore = Depends(get_store)):
    """Microsite with its campaign, latest visits and leads."""
    microsite = _microsite_or_404(store, microsite_id)
    campaign = store.get_campaign_by_id(microsite.campaign_id) if microsite.campaign_id else None

    return MicrositeDetail(
        **microsite.model_dump(),
        campaign=campaign,
        visits=store.list_visits(microsite_id)[:RECENT_VISITS_LIMIT],
        leads=store.list_leads(microsite_id),
    )


@router.patch("/microsites/{microsite_id}", response_model=Microsite)
async def update_microsite(
    microsite_id: str,
    body: MicrositeUpdate,
    store: RecordStore = Depends(get_store)
):
    """Shallow-merge the supplied fields into a microsite."""
    partial = body.model_dump(exclude_unset=True)
    if not partial:
        return _microsite_or_404(store, microsite_id)

    campaign_id = partial.get("campaign_id")
    if campaign_id and store.get_campaign_by_id(campaign_id) is None:
        raise HTTPException(status_code=404, detail="Campaign not found")

    microsite = store.update_microsite(microsite_id, partial)
    if microsite is None:
        raise HTTPException(status_code=404, detail="Microsite not found")

    logger.info("microsite_updated", microsite_id=microsite_id, fields=sorted(partial))
    return microsite


@router.delete("/microsites/{microsite_id}")
async def delete_microsite(microsite_id: str, store: RecordStore = Depends(get_store)):
    """Deletion isn't supported; the record is kept."""
    deleted = store.delete_microsite(microsite_id)
    return {"success": True, "deleted": deleted}


@router.get("/m/{slug}")
async def view_microsite(
    slug: str,
    location: Optional[str] = None,
    count: int = Query(DEFAULT_COUNT, ge=0, le=50),
    store: RecordStore = Depends(get_store)
) -> Dict[str, Any]:
    """Microsite by slug together with the social-proof customers to show on it."""
    microsite = store.get_microsite_by_slug(slug)
    if microsite is None:
        raise HTTPException(status_code=404, detail="Microsite not found")

    customers = select_customers(
        microsite.target_industry,
        microsite.target_company_size,
        location=location,
        count=count
    )

    return {
        "microsite": microsite.model_dump(mode="json"),
        "customers": [c.model_dump(mode="json") for c in customers],
    }


# === Campaigns ===

@router.post("/campaigns", response_model=Campaign)
async def create_campaign(body: CampaignCreate, store: RecordStore = Depends(get_store)):
    return store.create_campaign(body)


@router.get("/campaigns", response_model=List[CampaignSummary])
async def list_campaigns(store: RecordStore = Depends(get_store)):
    """Campaigns, newest first, each with the number of microsites in it."""
    counts: Dict[str, int] = {}
    for microsite in store.list_microsites():
        if microsite.campaign_id:
            counts[microsite.campaign_id] = counts.get(microsite.campaign_id, 0) + 1

    return [
        CampaignSummary(**campaign.model_dump(), microsite_count=counts.get(campaign.id, 0))
        for campaign in store.list_campaigns()
    ]


# === Leads ===

@router.post("/leads", response_model=Lead)
async def create_lead(body: LeadCreate, store: RecordStore = Depends(get_store)):
    return store.create_lead(body)


@router.get("/leads", response_model=List[Lead])
async def list_leads(
    microsite_id: Optional[str] = None,
    store: RecordStore = Depends(get_store)
):
    return store.list_leads(microsite_id)


# === Tracking ===

@router.post("/track")
async def track_event(
    request: Request,
    body: TrackRequest,
    store: RecordStore = Depends(get_store)
) -> Dict[str, Any]:
    """
    Record a visitor event.

    "pageview" upserts the visit and bumps the microsite counters,
    "cta_click" flags the visit; any other event is accepted and ignored.
    """
    _microsite_or_404(store, body.microsite_id)

    visitor_id = body.visitor_id or new_record_id()
    unique = False

    if body.event == "pageview":
        _, unique = store.record_pageview(
            body.microsite_id,
            visitor_id,
            ip_address=client_ip(request),
            user_agent=request.headers.get("user-agent"),
            referrer=request.headers.get("referer")
        )
    elif body.event == "cta_click":
        store.mark_cta_click(body.microsite_id, visitor_id)
    else:
        logger.debug("track_event_ignored", microsite_id=body.microsite_id, event_name=body.event)

    return {"success": True, "visitor_id": visitor_id, "unique": unique}


# === Settings ===

@router.get("/settings", response_model=SettingsResponse)
async def get_settings(store: RecordStore = Depends(get_store)):
    stored = store.get_settings()
    return SettingsResponse(
        configured=bool(stored.openai_api_key),
        setup_complete=stored.setup_complete
    )


@router.post("/settings", response_model=SettingsResponse)
async def save_settings(body: SettingsUpdate, store: RecordStore = Depends(get_store)):
    """Store an OpenAI key. The key is never returned."""
    key = (body.openai_api_key or "").strip()
    if key:
        stored = store.save_settings({"openai_api_key": key, "setup_complete": True})
        logger.info("settings_saved", configured=True)
    else:
        stored = store.get_settings()

    return SettingsResponse(
        configured=bool(stored.openai_api_key),
        setup_complete=stored.setup_complete
    )


# === Social proof & directory ===

@router.get("/social-proof", response_model=List[CustomerReference])
async def social_proof(
    industry: str = Query(..., min_length=1),
    size: str = Query(..., min_length=1),
    location: Optional[str] = None,
    count: int = Query(DEFAULT_COUNT, ge=0, le=50)
):
    return select_customers(industry, size, location=location, count=count)


@router.get("/companies/search", response_model=List[CompanyMatch])
async def company_search(
    q: str = "",
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=50)
):
    return search_companies(q, limit=limit)


# === Analytics ===

@router.get("/analytics", response_model=AnalyticsSummary)
async def analytics(store: RecordStore = Depends(get_store)):
    """Views, unique visitors, leads and conversion rate, overall and per microsite."""
    microsites = store.list_microsites()
    leads = store.list_leads()

    leads_by_microsite: Dict[str, int] = {}
    for lead in leads:
        leads_by_microsite[lead.microsite_id] = leads_by_microsite.get(lead.microsite_id, 0) + 1

    rows = [
        MicrositeStats(
            microsite_id=m.id,
            slug=m.slug,
            target_company_name=m.target_company_name,
            target_industry=m.target_industry,
            views=m.views,
            unique_visitors=m.unique_visitors,
            leads=leads_by_microsite.get(m.id, 0),
            conversion_rate=conversion_rate(leads_by_microsite.get(m.id, 0), m.unique_visitors),
        )
        for m in microsites
    ]

    total_unique = sum(m.unique_visitors for m in microsites)
    return AnalyticsSummary(
        total_microsites=len(microsites),
        total_views=sum(m.views for m in microsites),
        total_unique_visitors=total_unique,
        total_leads=len(leads),
        conversion_rate=conversion_rate(len(leads), total_unique),
        microsites=rows,
    )

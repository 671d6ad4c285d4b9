"""
Pydantic models for pitchsite.
Defines the company profile, composed content, stored records and
request/response schemas.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Literal, List
from datetime import datetime, timezone
from enum import Enum
import uuid


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_record_id() -> str:
    return uuid.uuid4().hex


EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


# === Enums ===

class StepStatus(str, Enum):
    """Workflow step status."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class Industry(str, Enum):
    """Industries recognised by the attribute extractor (in match order)."""
    HEALTHCARE = "Healthcare"
    MANUFACTURING = "Manufacturing"
    CONSTRUCTION = "Construction"
    EDUCATION = "Education"
    FINANCE = "Finance"
    LEGAL = "Legal"
    RETAIL = "Retail"
    TECHNOLOGY = "Technology"
    REAL_ESTATE = "Real Estate"
    PROFESSIONAL_SERVICES = "Professional Services"


class CompanySize(str, Enum):
    """Headcount brackets estimated from a website."""
    MICRO = "1-10 employees"
    SMALL = "10-50 employees"
    MEDIUM = "50-200 employees"
    LARGE = "200+ employees"


class SizeBracket(str, Enum):
    """Size scale used to compare against reference customers."""
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    ENTERPRISE = "enterprise"


class Region(str, Enum):
    NORTHEAST = "Northeast"
    SOUTHEAST = "Southeast"
    MIDWEST = "Midwest"
    SOUTHWEST = "Southwest"
    WEST = "West"
    INTERNATIONAL = "International"


class MicrositeStatus(str, Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"


class LeadStatus(str, Enum):
    NEW = "NEW"
    CONTACTED = "CONTACTED"
    QUALIFIED = "QUALIFIED"
    CONVERTED = "CONVERTED"
    LOST = "LOST"


class ContentSource(str, Enum):
    """Where the copy of a microsite came from."""
    TEMPLATE = "template"
    LLM = "llm"


# === Company Profile ===

class CompanyMetadata(BaseModel):
    """Automation-opportunity flags derived from page text."""
    has_ecommerce: bool = False
    has_documentation: bool = False
    has_automation: bool = False
    uses_manual_processes: bool = False


class CompanyProfile(BaseModel):
    """Heuristic attributes extracted from a company's website."""
    name: str = Field(..., min_length=1)
    description: str = Field(..., max_length=500)
    industry: Industry = Industry.PROFESSIONAL_SERVICES
    company_size: CompanySize
    tech_stack: List[str] = Field(default_factory=list)
    pain_points: List[str] = Field(..., min_length=1, max_length=5)
    logo_url: Optional[str] = None
    metadata: CompanyMetadata = Field(default_factory=CompanyMetadata)


# === Personalized Content ===

class ValueProposition(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    icon: str = Field(..., min_length=1)


class RecommendedSolution(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    benefits: List[str] = Field(..., min_length=1)
    roi: str = Field(..., min_length=1)


class PersonalizedContent(BaseModel):
    """Composed marketing copy. Every field is always populated."""
    model_config = ConfigDict(str_strip_whitespace=True)

    headline: str = Field(..., min_length=1, max_length=80)
    subheadline: str = Field(..., min_length=1, max_length=150)
    value_propositions: List[ValueProposition] = Field(..., min_length=1, max_length=3)
    recommended_solutions: List[RecommendedSolution] = Field(..., min_length=1, max_length=3)
    custom_pitch: str = Field(..., min_length=1)
    cta: str = Field(..., min_length=1)
    content_source: ContentSource = ContentSource.TEMPLATE


# === Stored Records ===

class MicrositeCreate(BaseModel):
    """Fields supplied when creating a microsite; the store fills the rest."""
    slug: Optional[str] = None
    campaign_id: Optional[str] = None
    target_company_name: str = Field(..., min_length=1)
    target_company_url: str
    target_industry: str = Industry.PROFESSIONAL_SERVICES.value
    target_company_size: str = CompanySize.SMALL.value
    company_description: str = ""
    logo_url: Optional[str] = None
    tech_stack: List[str] = Field(default_factory=list)
    pain_points: List[str] = Field(default_factory=list)
    company_metadata: CompanyMetadata = Field(default_factory=CompanyMetadata)
    headline: str = ""
    subheadline: str = ""
    value_propositions: List[ValueProposition] = Field(default_factory=list)
    recommended_solutions: List[RecommendedSolution] = Field(default_factory=list)
    custom_pitch: str = ""
    cta: str = ""
    content_source: ContentSource = ContentSource.TEMPLATE
    status: MicrositeStatus = MicrositeStatus.DRAFT
    published_at: Optional[datetime] = None


class Microsite(MicrositeCreate):
    """A persisted, personalized marketing page record."""
    id: str
    slug: str
    views: int = 0
    unique_visitors: int = 0
    created_at: datetime = Field(default_factory=utc_now)


class MicrositeUpdate(BaseModel):
    """Partial update for a microsite. Unknown fields are rejected."""
    model_config = ConfigDict(extra="forbid")

    campaign_id: Optional[str] = None
    target_company_name: Optional[str] = None
    target_industry: Optional[str] = None
    target_company_size: Optional[str] = None
    company_description: Optional[str] = None
    logo_url: Optional[str] = None
    pain_points: Optional[List[str]] = None
    headline: Optional[str] = None
    subheadline: Optional[str] = None
    value_propositions: Optional[List[ValueProposition]] = None
    recommended_solutions: Optional[List[RecommendedSolution]] = None
    custom_pitch: Optional[str] = None
    cta: Optional[str] = None
    status: Optional[MicrositeStatus] = None
    published_at: Optional[datetime] = None


class LeadCreate(BaseModel):
    """Contact form submission."""
    model_config = ConfigDict(str_strip_whitespace=True)

    microsite_id: str = Field(..., min_length=1)
    first_name: str = Field(..., min_length=1, description="First name")
    last_name: str = Field(..., min_length=1, description="Last name")
    email: str = Field(..., pattern=EMAIL_PATTERN, description="Contact email")
    phone: Optional[str] = None
    company_name: Optional[str] = None
    job_title: Optional[str] = None
    message: Optional[str] = None


class Lead(LeadCreate):
    id: str
    status: LeadStatus = LeadStatus.NEW
    created_at: datetime = Field(default_factory=utc_now)


class Visit(BaseModel):
    """One row per (microsite, visitor) pair."""
    id: str
    microsite_id: str
    visitor_id: str
    page_views: int = 1
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    referrer: Optional[str] = None
    cta_clicked: bool = False
    created_at: datetime = Field(default_factory=utc_now)


class CampaignCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    description: Optional[str] = None


class Campaign(CampaignCreate):
    """A named group of microsites."""
    id: str
    created_at: datetime = Field(default_factory=utc_now)


class IntegrationSettings(BaseModel):
    """Runtime settings saved through the settings endpoint."""
    openai_api_key: Optional[str] = None
    setup_complete: bool = False


# === Fetching ===

class FetchResult(BaseModel):
    """Result of fetching a company website."""
    success: bool
    url: str
    final_url: Optional[str] = None
    host: str
    html: Optional[str] = None
    status_code: Optional[int] = None
    error: Optional[str] = None
    method: Literal["http", "browser"] = "http"
    fetched_at: datetime = Field(default_factory=utc_now)


# === Social Proof / Directory ===

class CustomerReference(BaseModel):
    """A reference customer shown as social proof."""
    name: str
    industry: str
    location: str
    region: Region
    size: SizeBracket
    initials: str = ""


class CompanyMatch(BaseModel):
    name: str
    domain: str
    industry: str


# === Request Models ===

class GenerateRequest(BaseModel):
    url: str = Field(..., min_length=1, description="Target company website")


class TrackRequest(BaseModel):
    microsite_id: str = Field(..., min_length=1)
    event: str = "pageview"
    visitor_id: Optional[str] = None


class SettingsUpdate(BaseModel):
    openai_api_key: Optional[str] = None


# === Response Models ===

class GenerateResponse(BaseModel):
    success: bool = True
    microsite_id: str
    slug: str
    url: str
    content_source: ContentSource


class MicrositeDetail(Microsite):
    """A microsite with its campaign, most recent visits and leads."""
    campaign: Optional[Campaign] = None
    visits: List[Visit] = Field(default_factory=list)
    leads: List[Lead] = Field(default_factory=list)


class CampaignSummary(Campaign):
    microsite_count: int = 0


class SettingsResponse(BaseModel):
    """Settings view. Never includes the stored key itself."""
    configured: bool
    setup_complete: bool


class MicrositeStats(BaseModel):
    microsite_id: str
    slug: str
    target_company_name: str
    target_industry: str
    views: int
    unique_visitors: int
    leads: int
    conversion_rate: float


class AnalyticsSummary(BaseModel):
    total_microsites: int
    total_views: int
    total_unique_visitors: int
    total_leads: int
    conversion_rate: float
    microsites: List[MicrositeStats] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Error body."""
    type: Literal["error"] = "error"
    message: str
    details: Optional[str] = None
    timestamp: datetime = Field(default_factory=utc_now)

"""
Company attribute extraction.
Derives a CompanyProfile from a website's HTML using fixed keyword tables.
All results are heuristic hints with no confidence score.
"""

import re
from typing import Dict, List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup
import structlog

from ..models.schemas import (
    CompanyMetadata,
    CompanyProfile,
    CompanySize,
    Industry,
)
from .cleaner import html_cleaner

logger = structlog.get_logger()

DESCRIPTION_MAX_LENGTH = 500
NO_DESCRIPTION = "No description available"
FALLBACK_DESCRIPTION = "A business focused on innovation and growth"
LOGO_LOOKUP_URL = "https://logo.clearbit.com/{domain}"
MAX_PAIN_POINTS = 5

DEFAULT_PAIN_POINTS = ["Manual processes", "Workflow inefficiencies"]
FALLBACK_PAIN_POINTS = ["Manual processes", "Document management", "Workflow inefficiencies"]

# Technology name -> literal markers searched in the lowercased HTML
TECH_INDICATORS: Dict[str, List[str]] = {
    "Shopify": ["cdn.shopify.com", "shopify"],
    "WordPress": ["wp-content", "wordpress"],
    "React": ["react", "__react"],
    "Angular": ["ng-version", "angular"],
    "Vue": ["__vue__", "vue.js", "vue.min.js"],
    "Salesforce": ["salesforce.com", "force.com"],
    "HubSpot": ["hubspot", "hs-scripts"],
    "Google Analytics": ["google-analytics.com", "gtag("],
    "Stripe": ["js.stripe.com", "stripe.js"],
    "Mailchimp": ["mailchimp", "mc.js"],
}

# Checked in this order; the first industry with any keyword wins
INDUSTRY_KEYWORDS: Dict[Industry, List[str]] = {
    Industry.HEALTHCARE: ["healthcare", "medical", "hospital", "patient", "clinic", "dental", "hipaa"],
    Industry.MANUFACTURING: ["manufacturing", "production", "factory", "supply chain", "logistics", "warehouse"],
    Industry.CONSTRUCTION: ["construction", "building", "contractor", "development"],
    Industry.EDUCATION: ["education", "school", "university", "learning", "student"],
    Industry.FINANCE: ["finance", "banking", "investment", "accounting", "financial"],
    Industry.LEGAL: ["legal", "law firm", "attorney", "lawyer"],
    Industry.RETAIL: ["retail", "store", "shopping", "ecommerce", "e-commerce"],
    Industry.TECHNOLOGY: ["software", "technology", "saas", "platform", "api"],
    Industry.REAL_ESTATE: ["real estate", "property", "realtor"],
}

# Every matching category is collected
PAIN_POINT_KEYWORDS: Dict[str, List[str]] = {
    "Manual data entry": ["manual", "data entry", "paperwork"],
    "Inefficient invoice processing": ["invoice", "billing", "accounts payable", "payment processing"],
    "Document management challenges": ["document", "filing", "storage", "paper"],
    "Slow approval workflows": ["approval", "workflow", "bottleneck"],
    "Compliance and audit concerns": ["compliance", "audit", "regulation", "hipaa", "gdpr"],
    "Data accuracy issues": ["mistake", "accuracy", "validation"],
    "Integration complexity": ["integration", "erp", "multiple platforms"],
    "Scalability limitations": ["scalability", "scale up", "capacity"],
}

METADATA_PATTERNS = {
    "has_ecommerce": re.compile(r"cart|checkout|shop|ecommerce"),
    "has_documentation": re.compile(r"documentation|docs|api"),
    "has_automation": re.compile(r"automat"),
    "uses_manual_processes": re.compile(r"manual|paperwork|filing"),
}

TITLE_SEPARATOR = re.compile(r"\s*\|\s*|\s+[-–—]\s+")


def domain_from_host(host: str) -> str:
    """Strip the port and a leading www. from a host name."""
    host = (host or "").lower().split(":")[0]
    return host[4:] if host.startswith("www.") else host


def _meta_content(soup: BeautifulSoup, **attrs) -> Optional[str]:
    tag = soup.find("meta", attrs=attrs)
    if tag and tag.get("content"):
        content = tag["content"].strip()
        return content or None
    return None


def _matches_any(text: str, keywords: List[str]) -> bool:
    return any(keyword in text for keyword in keywords)


def detect_tech_stack(html: str) -> List[str]:
    """Technologies whose markers appear anywhere in the raw HTML."""
    html_lower = (html or "").lower()
    return [tech for tech, markers in TECH_INDICATORS.items() if _matches_any(html_lower, markers)]


def detect_industry(text: str) -> Industry:
    text = (text or "").lower()
    for industry, keywords in INDUSTRY_KEYWORDS.items():
        if _matches_any(text, keywords):
            return industry
    return Industry.PROFESSIONAL_SERVICES


def estimate_company_size(text: str, nav_links: int) -> CompanySize:
    """
    Estimate headcount from site complexity.

    The coarsest signal wins: enterprise language or a very large navigation
    bar means the largest bracket.
    """
    text = (text or "").lower()
    enterprise_language = "enterprise" in text or ("locations" in text and "offices" in text)
    hiring = "careers" in text or "join our team" in text

    if enterprise_language or nav_links > 20:
        return CompanySize.LARGE
    if hiring or nav_links > 10:
        return CompanySize.MEDIUM
    if nav_links > 5:
        return CompanySize.SMALL
    return CompanySize.MICRO


def identify_pain_points(text: str) -> List[str]:
    text = (text or "").lower()
    found = [name for name, keywords in PAIN_POINT_KEYWORDS.items() if _matches_any(text, keywords)]
    if not found:
        return list(DEFAULT_PAIN_POINTS)
    return found[:MAX_PAIN_POINTS]


def analyze_metadata(text: str) -> CompanyMetadata:
    text = (text or "").lower()
    return CompanyMetadata(**{flag: bool(pattern.search(text)) for flag, pattern in METADATA_PATTERNS.items()})


def _company_name_from_host(host: str) -> str:
    domain = domain_from_host(host)
    return domain.split(".")[0] if domain else "Company"


def extract_name(soup: BeautifulSoup, host: str) -> str:
    name = (
        _meta_content(soup, property="og:site_name")
        or _meta_content(soup, name="application-name")
    )
    if name:
        return name

    if soup.title and soup.title.string:
        title = TITLE_SEPARATOR.split(soup.title.string.strip())[0].strip()
        if title:
            return title

    return _company_name_from_host(host)


def extract_description(soup: BeautifulSoup) -> str:
    description = (
        _meta_content(soup, name="description")
        or _meta_content(soup, property="og:description")
    )
    if not description:
        for paragraph in soup.find_all("p"):
            text = paragraph.get_text(" ", strip=True)
            if text:
                description = text
                break

    return (description or NO_DESCRIPTION)[:DESCRIPTION_MAX_LENGTH]


def extract_logo(soup: BeautifulSoup, host: str) -> str:
    base_url = f"https://{host}/"

    og_image = _meta_content(soup, property="og:image")
    if og_image:
        return urljoin(base_url, og_image)

    for link in soup.find_all("link", href=True):
        rel = link.get("rel") or []
        if isinstance(rel, str):
            rel = rel.split()
        if any(token.lower() == "icon" for token in rel):
            return urljoin(base_url, link["href"].strip())

    return LOGO_LOOKUP_URL.format(domain=domain_from_host(host))


def extract_company_profile(html: str, host: str) -> CompanyProfile:
    """
    Build a CompanyProfile from raw HTML. Pure function, no I/O.

    Args:
        html: Raw page HTML
        host: Final resolved host of the page

    Returns:
        CompanyProfile with every field populated
    """
    soup = html_cleaner.parse(html)
    text = html_cleaner.visible_text(soup).lower()
    nav_links = html_cleaner.count_nav_links(soup)

    profile = CompanyProfile(
        name=extract_name(soup, host),
        description=extract_description(soup),
        industry=detect_industry(text),
        company_size=estimate_company_size(text, nav_links),
        tech_stack=detect_tech_stack(html),
        pain_points=identify_pain_points(text),
        logo_url=extract_logo(soup, host),
        metadata=analyze_metadata(text),
    )

    logger.info(
        "company_profile_extracted",
        host=host,
        name=profile.name,
        industry=profile.industry.value,
        company_size=profile.company_size.value,
        tech_count=len(profile.tech_stack),
        pain_points=len(profile.pain_points)
    )
    return profile


def fallback_profile(host: str) -> CompanyProfile:
    """Profile derived only from the host name, used when a site can't be fetched."""
    domain = domain_from_host(host)
    name = _company_name_from_host(host)

    return CompanyProfile(
        name=name[:1].upper() + name[1:],
        description=FALLBACK_DESCRIPTION,
        industry=Industry.PROFESSIONAL_SERVICES,
        company_size=CompanySize.SMALL,
        tech_stack=[],
        pain_points=list(FALLBACK_PAIN_POINTS),
        logo_url=LOGO_LOOKUP_URL.format(domain=domain or "example.com"),
        metadata=CompanyMetadata(uses_manual_processes=True),
    )

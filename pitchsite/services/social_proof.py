"""
Social-proof selection.
Picks reference customers to show next to a microsite, preferring the same
region, then the same industry, then a similar size.
"""

from typing import Dict, List, Optional, Union

import structlog

from ..models.schemas import CompanySize, CustomerReference, Region, SizeBracket

logger = structlog.get_logger()

DEFAULT_COUNT = 6

SIZE_ORDER = [SizeBracket.SMALL, SizeBracket.MEDIUM, SizeBracket.LARGE, SizeBracket.ENTERPRISE]

SIZE_TO_BRACKET: Dict[CompanySize, SizeBracket] = {
    CompanySize.MICRO: SizeBracket.SMALL,
    CompanySize.SMALL: SizeBracket.MEDIUM,
    CompanySize.MEDIUM: SizeBracket.LARGE,
    CompanySize.LARGE: SizeBracket.ENTERPRISE,
}

# (name, industry, location, region, size)
_CUSTOMERS = [
    # Midwest
    ("John Deere", "Manufacturing", "Illinois", "Midwest", "enterprise"),
    ("Caterpillar", "Manufacturing", "Illinois", "Midwest", "enterprise"),
    ("Whirlpool", "Manufacturing", "Michigan", "Midwest", "enterprise"),
    ("3M", "Manufacturing", "Minnesota", "Midwest", "enterprise"),
    ("Cummins", "Manufacturing", "Indiana", "Midwest", "large"),
    ("Kohler", "Manufacturing", "Wisconsin", "Midwest", "large"),
    ("Herman Miller", "Manufacturing", "Michigan", "Midwest", "large"),
    ("Brunswick", "Manufacturing", "Illinois", "Midwest", "large"),
    # Northeast
    ("General Electric", "Manufacturing", "Massachusetts", "Northeast", "enterprise"),
    ("Pfizer", "Healthcare", "New York", "Northeast", "enterprise"),
    ("Johnson & Johnson", "Healthcare", "New Jersey", "Northeast", "enterprise"),
    ("Bristol Myers", "Healthcare", "New York", "Northeast", "enterprise"),
    ("Boston Scientific", "Healthcare", "Massachusetts", "Northeast", "large"),
    ("BD (Becton Dickinson)", "Healthcare", "New Jersey", "Northeast", "large"),
    ("Stryker", "Healthcare", "Massachusetts", "Northeast", "large"),
    # Southeast
    ("Duke Energy", "Energy", "North Carolina", "Southeast", "enterprise"),
    ("Southern Company", "Energy", "Georgia", "Southeast", "enterprise"),
    ("Lockheed Martin", "Manufacturing", "Florida", "Southeast", "enterprise"),
    ("Coca-Cola", "Retail", "Georgia", "Southeast", "enterprise"),
    ("Home Depot", "Retail", "Georgia", "Southeast", "enterprise"),
    ("Publix", "Retail", "Florida", "Southeast", "large"),
    ("AutoZone", "Retail", "Tennessee", "Southeast", "large"),
    # West
    ("Boeing", "Manufacturing", "Washington", "West", "enterprise"),
    ("Northrop Grumman", "Manufacturing", "California", "West", "enterprise"),
    ("Raytheon", "Manufacturing", "Arizona", "West", "enterprise"),
    ("Intel", "Technology", "California", "West", "enterprise"),
    ("Applied Materials", "Manufacturing", "California", "West", "large"),
    ("Jacobs Engineering", "Professional Services", "Texas", "West", "large"),
    # Southwest
    ("Honeywell", "Manufacturing", "Arizona", "Southwest", "enterprise"),
    ("Raytheon Technologies", "Manufacturing", "Arizona", "Southwest", "enterprise"),
    ("Texas Instruments", "Technology", "Texas", "Southwest", "enterprise"),
    ("Dell Technologies", "Technology", "Texas", "Southwest", "enterprise"),
    ("Southwest Airlines", "Professional Services", "Texas", "Southwest", "large"),
    # Financial services
    ("State Farm", "Financial Services", "Illinois", "Midwest", "enterprise"),
    ("Nationwide", "Financial Services", "Ohio", "Midwest", "large"),
    ("TIAA", "Financial Services", "New York", "Northeast", "large"),
    ("Principal Financial", "Financial Services", "Iowa", "Midwest", "large"),
    # Education
    ("University of Michigan", "Education", "Michigan", "Midwest", "large"),
    ("Ohio State University", "Education", "Ohio", "Midwest", "large"),
    ("University of Texas", "Education", "Texas", "Southwest", "large"),
    ("UCLA", "Education", "California", "West", "large"),
    # International
    ("Siemens", "Manufacturing", "Germany", "International", "enterprise"),
    ("ABB", "Manufacturing", "Switzerland", "International", "enterprise"),
    ("Schneider Electric", "Manufacturing", "France", "International", "enterprise"),
]

STATE_TO_REGION: Dict[str, Region] = {
    **dict.fromkeys([
        "Illinois", "Indiana", "Iowa", "Kansas", "Michigan", "Minnesota", "Missouri",
        "Nebraska", "North Dakota", "Ohio", "South Dakota", "Wisconsin",
    ], Region.MIDWEST),
    **dict.fromkeys([
        "Connecticut", "Maine", "Massachusetts", "New Hampshire", "New Jersey",
        "New York", "Pennsylvania", "Rhode Island", "Vermont",
    ], Region.NORTHEAST),
    **dict.fromkeys([
        "Alabama", "Arkansas", "Delaware", "Florida", "Georgia", "Kentucky", "Louisiana",
        "Maryland", "Mississippi", "North Carolina", "South Carolina", "Tennessee",
        "Virginia", "West Virginia",
    ], Region.SOUTHEAST),
    **dict.fromkeys(["Arizona", "New Mexico", "Oklahoma", "Texas"], Region.SOUTHWEST),
    **dict.fromkeys([
        "Alaska", "California", "Colorado", "Hawaii", "Idaho", "Montana", "Nevada",
        "Oregon", "Utah", "Washington", "Wyoming",
    ], Region.WEST),
}


def company_initials(name: str) -> str:
    """Two-letter monogram used as a logo placeholder."""
    words = (name or "").split()
    if len(words) >= 2:
        return (words[0][0] + words[1][0]).upper()
    return (name or "").strip()[:2].upper()


CUSTOMERS: List[CustomerReference] = [
    CustomerReference(
        name=name,
        industry=industry,
        location=location,
        region=Region(region),
        size=SizeBracket(size),
        initials=company_initials(name),
    )
    for name, industry, location, region, size in _CUSTOMERS
]


def region_for_location(location: Optional[str]) -> Optional[Region]:
    """Resolve a US state name or a region label (case-insensitive)."""
    if not location:
        return None
    needle = location.strip().lower()
    for state, region in STATE_TO_REGION.items():
        if state.lower() == needle:
            return region
    for region in Region:
        if region.value.lower() == needle:
            return region
    return None


def size_bracket(size: Union[str, CompanySize, SizeBracket, None]) -> SizeBracket:
    """
    Map a headcount bracket or bracket label onto the social-proof scale.

    Unknown values map to the medium bracket.
    """
    if isinstance(size, SizeBracket):
        return size
    if isinstance(size, CompanySize):
        return SIZE_TO_BRACKET[size]
    value = (size or "").strip()
    for company_size, bracket in SIZE_TO_BRACKET.items():
        if company_size.value == value:
            return bracket
    try:
        return SizeBracket(value.lower())
    except ValueError:
        return SizeBracket.MEDIUM


def score_customer(
    customer: CustomerReference,
    industry: str,
    bracket: SizeBracket,
    region: Optional[Region]
) -> int:
    score = 0
    if region is not None and customer.region == region:
        score += 100
    if customer.industry == industry:
        score += 50
    distance = abs(SIZE_ORDER.index(bracket) - SIZE_ORDER.index(customer.size))
    score += (3 - distance) * 10
    if customer.size == SizeBracket.ENTERPRISE:
        score += 20
    return score


def select_customers(
    industry: str,
    size: Union[str, CompanySize, SizeBracket, None],
    location: Optional[str] = None,
    count: int = DEFAULT_COUNT,
    customers: Optional[List[CustomerReference]] = None
) -> List[CustomerReference]:
    """
    Pick the most relevant reference customers.

    Args:
        industry: Target industry label
        size: Target headcount bracket or social-proof bracket
        location: US state name or region label, if known
        count: Maximum number of customers returned
        customers: Candidate list (defaults to the built-in references)

    Returns:
        Up to count customers, highest score first; ties keep list order
    """
    if count <= 0:
        return []

    candidates = CUSTOMERS if customers is None else customers
    bracket = size_bracket(size)
    region = region_for_location(location)

    ranked = sorted(
        candidates,
        key=lambda c: score_customer(c, industry, bracket, region),
        reverse=True
    )

    logger.debug(
        "social_proof_selected",
        industry=industry,
        bracket=bracket.value,
        region=region.value if region else None,
        count=min(count, len(ranked))
    )
    return ranked[:count]

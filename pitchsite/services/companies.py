"""
Company directory for URL autocomplete.
Fuzzy name/domain search over a fixed list of well-known companies.
"""

import re
from typing import List, Tuple

from ..models.schemas import CompanyMatch

MIN_QUERY_LENGTH = 2
DEFAULT_LIMIT = 8
FUZZY_MIN_QUERY_LENGTH = 4
FUZZY_MAX_DISTANCE = 2

# (name, domain, industry)
_COMPANIES = [
    ("Apple", "apple.com", "Technology"),
    ("Microsoft", "microsoft.com", "Technology"),
    ("Google", "google.com", "Technology"),
    ("Amazon", "amazon.com", "Technology"),
    ("Meta (Facebook)", "meta.com", "Technology"),
    ("Netflix", "netflix.com", "Technology"),
    ("Tesla", "tesla.com", "Technology"),
    ("NVIDIA", "nvidia.com", "Technology"),
    ("Intel", "intel.com", "Technology"),
    ("AMD", "amd.com", "Technology"),
    ("Oracle", "oracle.com", "Technology"),
    ("Salesforce", "salesforce.com", "Technology"),
    ("Adobe", "adobe.com", "Technology"),
    ("IBM", "ibm.com", "Technology"),
    ("Cisco", "cisco.com", "Technology"),
    ("Dell Technologies", "dell.com", "Technology"),
    ("HP (Hewlett-Packard)", "hp.com", "Technology"),
    ("SAP", "sap.com", "Technology"),
    ("Uber", "uber.com", "Technology"),
    ("Airbnb", "airbnb.com", "Technology"),
    ("Spotify", "spotify.com", "Technology"),
    ("Twitter (X)", "twitter.com", "Technology"),
    ("LinkedIn", "linkedin.com", "Technology"),
    ("Snap", "snap.com", "Technology"),
    ("Shopify", "shopify.com", "Technology"),
    ("Stripe", "stripe.com", "Technology"),
    ("Zoom", "zoom.us", "Technology"),
    ("Slack", "slack.com", "Technology"),
    ("Dropbox", "dropbox.com", "Technology"),
    ("Atlassian", "atlassian.com", "Technology"),
    ("Walmart", "walmart.com", "Retail"),
    ("Amazon", "amazon.com", "Retail"),
    ("Target", "target.com", "Retail"),
    ("Costco", "costco.com", "Retail"),
    ("Home Depot", "homedepot.com", "Retail"),
    ("Lowes", "lowes.com", "Retail"),
    ("Best Buy", "bestbuy.com", "Retail"),
    ("Kroger", "kroger.com", "Retail"),
    ("CVS Health", "cvshealth.com", "Retail"),
    ("Walgreens", "walgreens.com", "Retail"),
    ("JPMorgan Chase", "jpmorganchase.com", "Financial Services"),
    ("Bank of America", "bankofamerica.com", "Financial Services"),
    ("Wells Fargo", "wellsfargo.com", "Financial Services"),
    ("Citigroup", "citigroup.com", "Financial Services"),
    ("Goldman Sachs", "goldmansachs.com", "Financial Services"),
    ("Morgan Stanley", "morganstanley.com", "Financial Services"),
    ("American Express", "americanexpress.com", "Financial Services"),
    ("Visa", "visa.com", "Financial Services"),
    ("Mastercard", "mastercard.com", "Financial Services"),
    ("PayPal", "paypal.com", "Financial Services"),
    ("UnitedHealth Group", "unitedhealthgroup.com", "Healthcare"),
    ("CVS Health", "cvshealth.com", "Healthcare"),
    ("Johnson & Johnson", "jnj.com", "Healthcare"),
    ("Pfizer", "pfizer.com", "Healthcare"),
    ("AbbVie", "abbvie.com", "Healthcare"),
    ("Merck", "merck.com", "Healthcare"),
    ("Bristol Myers Squibb", "bms.com", "Healthcare"),
    ("Eli Lilly", "lilly.com", "Healthcare"),
    ("Moderna", "modernatx.com", "Healthcare"),
    ("Exxon Mobil", "exxonmobil.com", "Energy"),
    ("Chevron", "chevron.com", "Energy"),
    ("ConocoPhillips", "conocophillips.com", "Energy"),
    ("Phillips 66", "phillips66.com", "Energy"),
    ("Duke Energy", "duke-energy.com", "Energy"),
    ("Huntsville Utilities", "hsvutil.org", "Energy"),
    ("General Motors", "gm.com", "Manufacturing"),
    ("Ford Motor", "ford.com", "Manufacturing"),
    ("Tesla", "tesla.com", "Manufacturing"),
    ("Toyota", "toyota.com", "Manufacturing"),
    ("Honda", "honda.com", "Manufacturing"),
    ("BMW", "bmw.com", "Manufacturing"),
    ("General Electric", "ge.com", "Manufacturing"),
    ("3M", "3m.com", "Manufacturing"),
    ("Caterpillar", "caterpillar.com", "Manufacturing"),
    ("Boeing", "boeing.com", "Manufacturing"),
    ("Lockheed Martin", "lockheedmartin.com", "Manufacturing"),
    ("Procter & Gamble", "pg.com", "Retail"),
    ("Coca-Cola", "coca-colacompany.com", "Retail"),
    ("PepsiCo", "pepsico.com", "Retail"),
    ("Nestle", "nestle.com", "Retail"),
    ("Unilever", "unilever.com", "Retail"),
    ("Nike", "nike.com", "Retail"),
    ("Adidas", "adidas.com", "Retail"),
    ("McDonalds", "mcdonalds.com", "Retail"),
    ("Starbucks", "starbucks.com", "Retail"),
    ("AT&T", "att.com", "Technology"),
    ("Verizon", "verizon.com", "Technology"),
    ("T-Mobile", "t-mobile.com", "Technology"),
    ("Comcast", "comcast.com", "Technology"),
    ("Deloitte", "deloitte.com", "Professional Services"),
    ("PwC", "pwc.com", "Professional Services"),
    ("EY (Ernst & Young)", "ey.com", "Professional Services"),
    ("KPMG", "kpmg.com", "Professional Services"),
    ("McKinsey & Company", "mckinsey.com", "Professional Services"),
    ("Boston Consulting Group", "bcg.com", "Professional Services"),
    ("Bain & Company", "bain.com", "Professional Services"),
    ("Harvard University", "harvard.edu", "Education"),
    ("Stanford University", "stanford.edu", "Education"),
    ("MIT", "mit.edu", "Education"),
    ("Yale University", "yale.edu", "Education"),
    ("Princeton University", "princeton.edu", "Education"),
]

COMPANIES: List[CompanyMatch] = [
    CompanyMatch(name=name, domain=domain, industry=industry)
    for name, domain, industry in _COMPANIES
]


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance with unit-cost insert, delete and substitute."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (ca != cb),
            ))
        previous = current
    return previous[-1]


def score_company(company: CompanyMatch, query: str) -> int:
    """
    Relevance of a company for a lowercased query; 0 means no match.

    Exact name or domain beats prefix, which beats a word-boundary hit,
    which beats a plain substring. Short typo'd prefixes score lowest.
    Shorter names get a small bonus.
    """
    name = company.name.lower()
    domain = company.domain.lower()

    if name == query or domain == query:
        score = 1000
    elif name.startswith(query) or domain.startswith(query):
        score = 500
    elif re.search(r"\b" + re.escape(query), name):
        score = 200
    elif query in name or query in domain:
        score = 100
    else:
        score = 0

    if score == 0 and len(query) >= FUZZY_MIN_QUERY_LENGTH:
        distance = levenshtein_distance(query, name[:len(query)])
        if distance <= FUZZY_MAX_DISTANCE:
            score = 50 - distance * 10

    if score > 0:
        score += max(0, 50 - len(company.name))
    return score


def search_companies(query: str, limit: int = DEFAULT_LIMIT) -> List[CompanyMatch]:
    """
    Search the directory.

    Args:
        query: Partial company name or domain
        limit: Maximum number of matches

    Returns:
        Matches ordered by relevance, one per domain
    """
    query = (query or "").strip().lower()
    if len(query) < MIN_QUERY_LENGTH or limit <= 0:
        return []

    scored: List[Tuple[int, CompanyMatch]] = []
    for company in COMPANIES:
        score = score_company(company, query)
        if score > 0:
            scored.append((score, company))

    scored.sort(key=lambda item: item[0], reverse=True)

    results: List[CompanyMatch] = []
    seen_domains = set()
    for _, company in scored:
        if company.domain in seen_domains:
            continue
        seen_domains.add(company.domain)
        results.append(company)
        if len(results) >= limit:
            break
    return results

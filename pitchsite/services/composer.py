"""
Content composition service.
Turns a CompanyProfile into PersonalizedContent, either from fixed templates
or from an LLM response merged field by field over the template.
"""

import json
import re
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError
import structlog

from ..core.config import settings
from ..core.llm_client import LLMClient
from ..graph.prompts import PromptTemplates, SOLUTION_CATALOG, VENDOR_NAME
from ..models.schemas import (
    CompanyProfile,
    ContentSource,
    Industry,
    PersonalizedContent,
    RecommendedSolution,
    ValueProposition,
)

logger = structlog.get_logger()

HEADLINE_MAX_LENGTH = 80
SUBHEADLINE_MAX_LENGTH = 150
MAX_ITEMS = 3

HEADLINE_TEMPLATE = "Transform {name} with Intelligent Automation"
SUBHEADLINE_TEMPLATE = "Eliminate manual processes and accelerate {industry} operations"
DEFAULT_CTA = "Get Your Custom Solution"

HR_PATTERN = re.compile(r"\bhr\b|employee")


def _solution(key: str, description: str) -> RecommendedSolution:
    entry = SOLUTION_CATALOG[key]
    return RecommendedSolution(
        name=entry["name"],
        description=description,
        benefits=list(entry["benefits"]),
        roi=entry["roi"],
    )


def recommend_solutions(profile: CompanyProfile) -> List[RecommendedSolution]:
    """
    Rule-table solution recommendation.

    AP Automation for invoice/billing/payable pain points, HR Automation for
    healthcare or HR/employee pain points, Freight Process Automation for
    manufacturing or freight/shipping pain points. Intelligent Data Capture
    is always appended and the list is cut to three.
    """
    pains = [p.lower() for p in profile.pain_points]

    def any_pain(*needles: str) -> bool:
        return any(needle in pain for pain in pains for needle in needles)

    solutions: List[RecommendedSolution] = []

    if any_pain("invoice", "billing", "payable"):
        solutions.append(_solution(
            "ap_automation",
            f"Perfect for {profile.name}'s invoice processing needs",
        ))

    if profile.industry == Industry.HEALTHCARE or any(HR_PATTERN.search(p) for p in pains):
        solutions.append(_solution(
            "hr_automation",
            f"HIPAA-compliant HR automation for {profile.industry.value} organizations",
        ))

    if profile.industry == Industry.MANUFACTURING or any_pain("freight", "shipping"):
        solutions.append(_solution(
            "freight_automation",
            f"Streamline shipping and logistics for {profile.name}",
        ))

    solutions.append(_solution(
        "intelligent_data_capture",
        "AI-powered document processing foundation",
    ))

    return solutions[:MAX_ITEMS]


def _headline(name: str) -> str:
    room = HEADLINE_MAX_LENGTH - len(HEADLINE_TEMPLATE.format(name=""))
    if len(name) > room:
        name = name[:room].rstrip()
    return HEADLINE_TEMPLATE.format(name=name)


def _value_propositions(profile: CompanyProfile) -> List[ValueProposition]:
    industry = profile.industry.value
    return [
        ValueProposition(
            title="Eliminate Manual Work",
            description=(
                f"Save hours every week by automating document processing and data capture "
                f"for {industry} businesses like {profile.name}."
            ),
            icon="⚡",
        ),
        ValueProposition(
            title="Seamless Integration",
            description=(
                f"Connect {profile.name}'s existing ERP and business systems to automated "
                f"workflows without disrupting day-to-day operations."
            ),
            icon="🔗",
        ),
        ValueProposition(
            title=f"Built for {industry}",
            description=(
                f"Customized workflow automation designed for the unique challenges "
                f"of {industry} organizations."
            ),
            icon="🎯",
        ),
    ]


def _pitch(profile: CompanyProfile) -> str:
    industry = profile.industry.value
    if profile.pain_points:
        challenges = (
            "We've identified that you may be experiencing challenges with "
            f"{' and '.join(profile.pain_points[:2])}."
        )
    else:
        challenges = "Manual processes can significantly impact your operational efficiency."

    return (
        f"Dear {profile.name} Team,\n\n"
        f"We understand that {industry} organizations like yours face unique challenges when it "
        f"comes to document management and workflow automation. {challenges}\n\n"
        f"{VENDOR_NAME} has helped hundreds of {industry} companies transform their operations "
        f"through customized workflow automation. Our solutions eliminate manual data entry, "
        f"reduce errors by up to 95%, and deliver measurable ROI within months.\n\n"
        f"With seamless integration to major ERP systems and industry-specific customizations, "
        f"we can help {profile.name} move forward without the burden of legacy paper-based "
        f"processes.\n\n"
        f"Let's discuss how we can customize a solution specifically for your needs."
    )


def generate_template_content(profile: CompanyProfile) -> PersonalizedContent:
    """Deterministic content built only from the profile."""
    return PersonalizedContent(
        headline=_headline(profile.name),
        subheadline=SUBHEADLINE_TEMPLATE.format(industry=profile.industry.value.lower()),
        value_propositions=_value_propositions(profile),
        recommended_solutions=recommend_solutions(profile),
        custom_pitch=_pitch(profile),
        cta=DEFAULT_CTA,
        content_source=ContentSource.TEMPLATE,
    )


# === LLM response coalescing ===

def _pick(data: Dict[str, Any], snake: str, camel: str) -> Any:
    return data[snake] if snake in data else data.get(camel)


def _clean_text(value: Any, max_length: Optional[int] = None) -> Optional[str]:
    """Stripped string, or None when missing, blank or too long."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not value:
        return None
    if max_length is not None and len(value) > max_length:
        return None
    return value


def _clean_items(value: Any, model: Type[BaseModel]) -> List[BaseModel]:
    """Validate each list item against model, dropping the ones that don't conform."""
    if not isinstance(value, list):
        return []

    items = []
    for raw in value:
        if not isinstance(raw, dict):
            continue
        if isinstance(raw.get("benefits"), list):
            raw = {
                **raw,
                "benefits": [b.strip() for b in raw["benefits"] if isinstance(b, str) and b.strip()],
            }
        try:
            items.append(model.model_validate(raw))
        except ValidationError:
            continue
    return items[:MAX_ITEMS]


def coalesce_content(data: Dict[str, Any], fallback: PersonalizedContent) -> PersonalizedContent:
    """
    Merge an LLM response over template content, field by field.

    Args:
        data: Parsed JSON object from the model (snake_case or camelCase keys)
        fallback: Template content used for every missing or invalid field

    Returns:
        PersonalizedContent; content_source is "llm" if any field came from data
    """
    used_model = False
    merged: Dict[str, Any] = {}

    text_fields = [
        ("headline", "headline", HEADLINE_MAX_LENGTH),
        ("subheadline", "subheadline", SUBHEADLINE_MAX_LENGTH),
        ("custom_pitch", "customPitch", None),
        ("cta", "cta", None),
    ]
    for snake, camel, max_length in text_fields:
        value = _clean_text(_pick(data, snake, camel), max_length)
        if value is None:
            merged[snake] = getattr(fallback, snake)
        else:
            merged[snake] = value
            used_model = True

    list_fields = [
        ("value_propositions", "valuePropositions", ValueProposition),
        ("recommended_solutions", "recommendedSolutions", RecommendedSolution),
    ]
    for snake, camel, model in list_fields:
        items = _clean_items(_pick(data, snake, camel), model)
        if items:
            merged[snake] = items
            used_model = True
        else:
            merged[snake] = getattr(fallback, snake)

    merged["content_source"] = ContentSource.LLM if used_model else ContentSource.TEMPLATE
    return PersonalizedContent(**merged)


class ContentComposer:
    """Composes microsite copy, preferring the LLM when a key is available."""

    def __init__(self, llm_client_factory: Callable[..., Any] = LLMClient):
        self.llm_client_factory = llm_client_factory

    def compose(self, profile: CompanyProfile, api_key: Optional[str] = None) -> PersonalizedContent:
        """
        Build content for a profile. Never raises for LLM problems.

        Args:
            profile: Extracted company profile
            api_key: Key saved in integration settings, if any

        Returns:
            Fully populated PersonalizedContent
        """
        template = generate_template_content(profile)

        key = api_key or settings.OPENAI_API_KEY
        if not key:
            logger.info("content_composed", company=profile.name, source=template.content_source.value)
            return template

        try:
            content = self._compose_with_llm(profile, key, template)
        except Exception as e:
            logger.warning(
                "llm_composition_failed",
                company=profile.name,
                error=str(e),
                error_type=type(e).__name__
            )
            return template

        logger.info("content_composed", company=profile.name, source=content.content_source.value)
        return content

    def _compose_with_llm(
        self,
        profile: CompanyProfile,
        api_key: str,
        template: PersonalizedContent
    ) -> PersonalizedContent:
        client = self.llm_client_factory(api_key=api_key)

        prompt = PromptTemplates.microsite_content(
            company_name=profile.name,
            industry=profile.industry.value,
            company_size=profile.company_size.value,
            description=profile.description,
            pain_points=profile.pain_points,
            tech_stack=profile.tech_stack,
        )

        raw, meta = client.generate("microsite_content", prompt, force_json=True)

        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")

        return coalesce_content(data, template)


# Singleton instance
content_composer = ContentComposer()

"""
Prompt templates for microsite content generation.
"""

from typing import Dict, List

VENDOR_NAME = "Mosaic Corporation"
VENDOR_TAGLINE = "Leave Paper Behind. Move Business Forward."

# Offerable solutions, in the order they're listed to the model
SOLUTION_CATALOG: Dict[str, Dict] = {
    "ap_automation": {
        "name": "AP Automation",
        "summary": "Invoice processing, data entry elimination, ERP integration",
        "description": "Streamline invoice processing with automated data capture, approval workflows, and seamless ERP integration.",
        "benefits": [
            "Eliminate manual data entry",
            "Reduce processing time by 80%",
            "Improve accuracy and reduce errors",
            "Accelerate payment cycles",
        ],
        "roi": "80% reduction in processing time",
    },
    "sales_order_processing": {
        "name": "Sales Order Processing",
        "summary": "Order-to-cash cycle compression",
        "description": "Compress order-to-cash cycles with automated order capture and processing.",
        "benefits": [
            "Faster order fulfillment",
            "Reduced order errors",
            "Improved customer satisfaction",
            "Real-time order tracking",
        ],
        "roi": "40% shorter order-to-cash cycle",
    },
    "hr_automation": {
        "name": "HR Automation",
        "summary": "Paperless employee files, onboarding workflows, HIPAA-compliant",
        "description": "Transform HR operations with paperless employee files and automated onboarding workflows.",
        "benefits": [
            "HIPAA-compliant document storage",
            "Streamlined onboarding",
            "Centralized employee records",
            "Automated compliance tracking",
        ],
        "roi": "60% faster onboarding",
    },
    "intelligent_data_capture": {
        "name": "Intelligent Data Capture",
        "summary": "Automated classification and validation",
        "description": "Automated document classification, validation, and routing powered by AI.",
        "benefits": [
            "Automatic document classification",
            "Data validation and verification",
            "Intelligent routing",
            "Multi-format support",
        ],
        "roi": "95%+ accuracy rate",
    },
    "ecm": {
        "name": "Enterprise Content Management",
        "summary": "Single repository systems",
        "description": "Single repository system for all your business documents and content.",
        "benefits": [
            "Centralized document storage",
            "Advanced search capabilities",
            "Version control",
            "Secure access management",
        ],
        "roi": "50% less time spent searching for documents",
    },
    "freight_automation": {
        "name": "Freight Process Automation",
        "summary": "Shipping document automation",
        "description": "Automate shipping documentation and accelerate billing processes.",
        "benefits": [
            "Automated shipping documents",
            "Faster billing cycles",
            "Reduced shipping errors",
            "Better carrier management",
        ],
        "roi": "50% faster billing cycles",
    },
}


class PromptTemplates:
    """Collection of prompt templates for content generation."""

    @staticmethod
    def microsite_content(
        company_name: str,
        industry: str,
        company_size: str,
        description: str,
        pain_points: List[str],
        tech_stack: List[str],
    ) -> str:
        """
        Prompt for a personalized microsite pitch returned as one JSON object.

        Args:
            company_name: Target company name
            industry: Detected industry label
            company_size: Estimated headcount bracket
            description: Site description
            pain_points: Identified pain points
            tech_stack: Detected technologies

        Returns:
            Formatted prompt string
        """
        catalog = "\n".join(
            f"{i}. {solution['name']} - {solution['summary']}"
            for i, solution in enumerate(SOLUTION_CATALOG.values(), start=1)
        )

        return f"""You are an expert B2B marketing copywriter for {VENDOR_NAME}, a leader in workflow automation and document digitization solutions.

Company Context:
- Name: {company_name}
- Industry: {industry}
- Size: {company_size}
- Description: {description}
- Identified Pain Points: {', '.join(pain_points)}
- Tech Stack: {', '.join(tech_stack) or 'Unknown'}

{VENDOR_NAME}'s Core Solutions:
{catalog}

Value Proposition: "{VENDOR_TAGLINE}"
We specialize in customized workflow automation that eliminates manual data entry, reduces errors, and delivers maximum ROI through seamless ERP integration.

Your Task:
Create a highly personalized microsite pitch for {company_name} that:
1. Addresses their specific industry challenges
2. Connects their pain points to our solutions
3. Demonstrates deep understanding of their business
4. Presents compelling ROI and transformation potential

Respond with a single JSON object with exactly these fields:
{{
  "headline": "Compelling, personalized headline (max 80 chars) that speaks directly to their situation",
  "subheadline": "Supporting subheadline (max 150 chars) that reinforces value",
  "value_propositions": [
    {{
      "title": "Value prop title",
      "description": "2-3 sentence description tailored to their needs",
      "icon": "emoji icon that represents this value"
    }}
  ],
  "recommended_solutions": [
    {{
      "name": "Solution name from the list above",
      "description": "Why this solution is perfect for them",
      "benefits": ["Specific benefit 1", "Specific benefit 2", "Specific benefit 3"],
      "roi": "Expected ROI or time savings"
    }}
  ],
  "custom_pitch": "3-4 paragraph personalized pitch that tells a story about their transformation. Be specific to their industry and challenges.",
  "cta": "Compelling call-to-action text"
}}

Include at most 3 value propositions and at most 3 recommended solutions.
Make it feel like this was written specifically for {company_name}, not a generic template. Use their industry terminology and reference their specific challenges."""

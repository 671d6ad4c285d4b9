"""
Tests for the generation workflow and its nodes.
"""

import json
from unittest.mock import MagicMock

import pytest

from pitchsite.graph.nodes.generation_nodes import route_after_fetch
from pitchsite.graph.workflows.generation_workflow import create_generation_workflow, run_generation
from pitchsite.models.schemas import ContentSource, MicrositeStatus, StepStatus
from pitchsite.services.composer import ContentComposer
from pitchsite.services.fetcher import WebsiteFetcher


@pytest.fixture
def fetcher(site_transport):
    return WebsiteFetcher(transport=site_transport, use_browser=False)


class TestRouting:
    """Conditional edge after fetch."""

    def test_success_goes_to_extract(self):
        assert route_after_fetch({"fetch_success": True, "html": "<p>x</p>"}) == "extract"

    def test_failure_goes_to_fallback(self):
        assert route_after_fetch({"fetch_success": False, "host": "x.com"}) == "fallback_profile"

    def test_empty_page_goes_to_fallback(self):
        assert route_after_fetch({"fetch_success": True, "html": ""}) == "fallback_profile"


class TestGenerationWorkflow:
    """Full pipeline runs against a mocked site."""

    @pytest.mark.asyncio
    async def test_generates_published_microsite(self, memory_store, fetcher):
        workflow = await create_generation_workflow(memory_store, fetcher=fetcher, composer=ContentComposer())

        state = await run_generation(workflow, "https://acme.com")

        microsite = memory_store.get_microsite_by_id(state["microsite_id"])
        assert microsite is not None
        assert microsite.slug == state["slug"] == "acme-logistics"
        assert microsite.status == MicrositeStatus.PUBLISHED
        assert microsite.published_at is not None
        assert microsite.target_industry == "Manufacturing"
        assert microsite.target_company_url == "https://acme.com"
        assert microsite.content_source == ContentSource.TEMPLATE
        assert [s.name for s in microsite.recommended_solutions] == [
            "AP Automation",
            "Freight Process Automation",
            "Intelligent Data Capture",
        ]
        assert state["steps"]["fetch"] == StepStatus.COMPLETED
        assert state["html"] is None

    @pytest.mark.asyncio
    async def test_unreachable_site_uses_fallback_profile(self, memory_store, fetcher):
        workflow = await create_generation_workflow(memory_store, fetcher=fetcher, composer=ContentComposer())

        state = await run_generation(workflow, "https://globex.down")

        microsite = memory_store.get_microsite_by_id(state["microsite_id"])
        assert microsite.target_company_name == "Globex"
        assert microsite.target_industry == "Professional Services"
        assert microsite.company_description == "A business focused on innovation and growth"
        assert state["steps"]["fetch"] == StepStatus.FAILED
        assert state["steps"]["persist"] == StepStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_not_found_page_uses_fallback_profile(self, memory_store, fetcher):
        workflow = await create_generation_workflow(memory_store, fetcher=fetcher, composer=ContentComposer())

        state = await run_generation(workflow, "https://www.initech.com")

        assert memory_store.get_microsite_by_id(state["microsite_id"]).target_company_name == "Initech"

    @pytest.mark.asyncio
    async def test_stored_key_reaches_composer(self, memory_store, fetcher):
        """A key saved in settings switches composition to the LLM."""
        memory_store.save_settings({"openai_api_key": "sk-stored", "setup_complete": True})

        client = MagicMock()
        client.generate.return_value = (json.dumps({"headline": "Acme, automated"}), {})
        factory = MagicMock(return_value=client)

        workflow = await create_generation_workflow(
            memory_store,
            fetcher=fetcher,
            composer=ContentComposer(llm_client_factory=factory)
        )
        state = await run_generation(workflow, "https://acme.com")

        factory.assert_called_once_with(api_key="sk-stored")
        assert state["content_source"] == "llm"
        assert memory_store.get_microsite_by_id(state["microsite_id"]).headline == "Acme, automated"

    @pytest.mark.asyncio
    async def test_runs_keep_no_saved_state(self, memory_store, fetcher):
        """Finished runs leave nothing behind in the compiled graph."""
        workflow = await create_generation_workflow(memory_store, fetcher=fetcher, composer=ContentComposer())

        for _ in range(3):
            await run_generation(workflow, "https://acme.com")

        assert workflow.checkpointer is None
        assert len(memory_store.list_microsites()) == 3

    @pytest.mark.asyncio
    async def test_repeat_generation_gets_new_slug(self, memory_store, fetcher):
        workflow = await create_generation_workflow(memory_store, fetcher=fetcher, composer=ContentComposer())

        first = await run_generation(workflow, "https://acme.com")
        second = await run_generation(workflow, "https://acme.com")

        assert first["slug"] == "acme-logistics"
        assert second["slug"] == "acme-logistics-2"
        assert first["microsite_id"] != second["microsite_id"]

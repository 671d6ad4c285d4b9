"""
Tests for the record store backends.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
import json
import os

from pydantic import ValidationError
import pytest

from pitchsite.core.config import Settings
from pitchsite.models.schemas import LeadStatus, MicrositeStatus
from pitchsite.services.storage import JsonFileStore, MemoryStore, create_store


def microsite_fields(name="Acme Corp", **overrides):
    data = {
        "target_company_name": name,
        "target_company_url": "https://acme.com",
        "headline": "Transform Acme",
    }
    data.update(overrides)
    return data


def lead_fields(microsite_id, **overrides):
    data = {
        "microsite_id": microsite_id,
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
    }
    data.update(overrides)
    return data


@pytest.fixture(params=["memory", "json"])
def store(request, tmp_path):
    """Each test runs against both backends."""
    if request.param == "memory":
        return MemoryStore()
    return JsonFileStore(str(tmp_path / "data"))


# ============================================
# Microsite Tests
# ============================================

class TestMicrosites:
    """Microsite create/read/update operations."""

    def test_create_assigns_identity(self, store):
        microsite = store.create_microsite(microsite_fields())

        assert microsite.id
        assert microsite.slug == "acme-corp"
        assert microsite.views == 0
        assert microsite.unique_visitors == 0
        assert microsite.status == MicrositeStatus.DRAFT
        assert microsite.created_at is not None

    def test_lookup_by_slug_and_id(self, store):
        microsite = store.create_microsite(microsite_fields())

        assert store.get_microsite_by_slug("acme-corp").id == microsite.id
        assert store.get_microsite_by_id(microsite.id).slug == "acme-corp"
        assert store.get_microsite_by_slug("missing") is None
        assert store.get_microsite_by_id("missing") is None

    def test_slug_collisions_get_suffixes(self, store):
        slugs = [store.create_microsite(microsite_fields()).slug for _ in range(3)]

        assert slugs == ["acme-corp", "acme-corp-2", "acme-corp-3"]

    def test_long_slug_collision_stays_bounded(self, store):
        name = "International Widget Manufacturing Company"
        first = store.create_microsite(microsite_fields(name)).slug
        second = store.create_microsite(microsite_fields(name)).slug

        assert first != second
        assert len(first) <= 30
        assert len(second) <= 30
        assert second.endswith("-2")

    def test_list_filters_by_status(self, store):
        store.create_microsite(microsite_fields("Draft Co"))
        published = store.create_microsite(microsite_fields("Live Co", status=MicrositeStatus.PUBLISHED))

        assert len(store.list_microsites()) == 2
        assert [m.id for m in store.list_microsites(MicrositeStatus.PUBLISHED)] == [published.id]

    def test_update_merges_fields(self, store):
        microsite = store.create_microsite(microsite_fields())

        updated = store.update_microsite(microsite.id, {"headline": "New", "id": "hijack", "status": MicrositeStatus.PUBLISHED})

        assert updated.id == microsite.id
        assert updated.headline == "New"
        assert updated.status == MicrositeStatus.PUBLISHED
        assert updated.target_company_name == "Acme Corp"
        assert store.get_microsite_by_id(microsite.id).headline == "New"

    def test_update_missing_returns_none(self, store):
        assert store.update_microsite("missing", {"headline": "x"}) is None

    def test_delete_is_a_no_op(self, store):
        microsite = store.create_microsite(microsite_fields())

        assert store.delete_microsite(microsite.id) is False
        assert store.get_microsite_by_id(microsite.id) is not None

    def test_publishing_stamps_published_at(self, store):
        microsite = store.create_microsite(microsite_fields())
        assert microsite.published_at is None

        published = store.update_microsite(microsite.id, {"status": MicrositeStatus.PUBLISHED})

        assert published.published_at is not None
        assert store.get_microsite_by_id(microsite.id).published_at == published.published_at

    def test_explicit_published_at_is_kept(self, store):
        microsite = store.create_microsite(microsite_fields())
        when = datetime(2024, 5, 1, tzinfo=timezone.utc)

        published = store.update_microsite(microsite.id, {"status": "PUBLISHED", "published_at": when})

        assert published.published_at == when

    def test_draft_update_leaves_published_at_unset(self, store):
        microsite = store.create_microsite(microsite_fields())

        assert store.update_microsite(microsite.id, {"headline": "Draft copy"}).published_at is None

    def test_increment_views(self, store):
        microsite = store.create_microsite(microsite_fields())

        store.increment_views(microsite.id, is_unique=True)
        updated = store.increment_views(microsite.id, is_unique=False)

        assert updated.views == 2
        assert updated.unique_visitors == 1


# ============================================
# Lead, Visit and Settings Tests
# ============================================

class TestLeadsAndVisits:
    """Lead capture and visit tracking."""

    def test_create_and_list_leads(self, store):
        lead = store.create_lead(lead_fields("m1"))
        store.create_lead(lead_fields("m2"))

        assert lead.status == LeadStatus.NEW
        assert lead.id
        assert len(store.list_leads()) == 2
        assert [l.id for l in store.list_leads("m1")] == [lead.id]

    def test_record_pageview_upserts_visit(self, store):
        microsite = store.create_microsite(microsite_fields())

        visit, unique = store.record_pageview(microsite.id, "visitor-1", user_agent="pytest")
        again, unique_again = store.record_pageview(microsite.id, "visitor-1")

        assert unique is True
        assert unique_again is False
        assert again.id == visit.id
        assert again.page_views == 2
        assert again.user_agent == "pytest"
        assert len(store.list_visits(microsite.id)) == 1

        refreshed = store.get_microsite_by_id(microsite.id)
        assert refreshed.views == 2
        assert refreshed.unique_visitors == 1

    def test_distinct_visitors_are_unique(self, store):
        microsite = store.create_microsite(microsite_fields())

        store.record_pageview(microsite.id, "a")
        store.record_pageview(microsite.id, "b")

        assert store.get_microsite_by_id(microsite.id).unique_visitors == 2

    def test_mark_cta_click(self, store):
        microsite = store.create_microsite(microsite_fields())
        store.record_pageview(microsite.id, "visitor-1")

        visit = store.mark_cta_click(microsite.id, "visitor-1")

        assert visit.cta_clicked is True
        assert store.get_visit_by_visitor(microsite.id, "visitor-1").cta_clicked is True
        assert store.mark_cta_click(microsite.id, "nobody") is None

    def test_concurrent_pageviews_are_counted_exactly(self, store):
        microsite = store.create_microsite(microsite_fields())

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda i: store.record_pageview(microsite.id, f"v{i % 5}"), range(40)))

        refreshed = store.get_microsite_by_id(microsite.id)
        assert refreshed.views == 40
        assert refreshed.unique_visitors == 5


class TestCampaigns:
    """Campaign records and microsite grouping."""

    def test_create_and_get(self, store):
        campaign = store.create_campaign({"name": "  Q3 Healthcare  ", "description": "Hospitals in the Midwest"})

        assert campaign.id
        assert campaign.name == "Q3 Healthcare"
        assert store.get_campaign_by_id(campaign.id) == campaign
        assert store.get_campaign_by_id("missing") is None

    def test_list_newest_first(self, store):
        for name in ("First", "Second", "Third"):
            store.create_campaign({"name": name})

        campaigns = store.list_campaigns()

        assert {c.name for c in campaigns} == {"First", "Second", "Third"}
        assert [c.created_at for c in campaigns] == sorted((c.created_at for c in campaigns), reverse=True)

    def test_blank_name_rejected(self, store):
        with pytest.raises(ValidationError):
            store.create_campaign({"name": "   "})

    def test_microsites_filtered_by_campaign(self, store):
        campaign = store.create_campaign({"name": "Manufacturing push"})
        grouped = store.create_microsite(microsite_fields("Grouped Co", campaign_id=campaign.id))
        store.create_microsite(microsite_fields("Loose Co"))

        assert [m.id for m in store.list_microsites(campaign_id=campaign.id)] == [grouped.id]
        assert len(store.list_microsites()) == 2


class TestSettings:
    """Integration settings singleton."""

    def test_defaults(self, store):
        stored = store.get_settings()

        assert stored.openai_api_key is None
        assert stored.setup_complete is False

    def test_partial_merge(self, store):
        store.save_settings({"openai_api_key": "sk-1"})
        merged = store.save_settings({"setup_complete": True})

        assert merged.openai_api_key == "sk-1"
        assert merged.setup_complete is True
        assert store.get_settings() == merged

    def test_reset_clears_everything(self, store):
        store.create_microsite(microsite_fields())
        store.save_settings({"openai_api_key": "sk-1"})

        store.reset()

        assert store.list_microsites() == []
        assert store.get_settings().openai_api_key is None


# ============================================
# JSON Backend Tests
# ============================================

class TestJsonFileStore:
    """Behaviour specific to the JSON-file backend."""

    def test_directory_created_lazily(self, tmp_path):
        data_dir = tmp_path / "data"
        store = JsonFileStore(str(data_dir))

        assert not data_dir.exists()
        store.create_microsite(microsite_fields())
        assert (data_dir / "microsites.json").exists()

    def test_data_survives_new_instance(self, tmp_path):
        microsite = JsonFileStore(str(tmp_path)).create_microsite(microsite_fields())

        assert JsonFileStore(str(tmp_path)).get_microsite_by_id(microsite.id).slug == "acme-corp"

    def test_corrupt_file_reads_as_empty(self, tmp_path):
        (tmp_path / "microsites.json").write_text("{not json")

        assert JsonFileStore(str(tmp_path)).list_microsites() == []

    def test_unwritable_directory_does_not_raise(self, tmp_path):
        """Write failures are logged; the caller still gets a record."""
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        store = JsonFileStore(str(blocker / "data"))

        microsite = store.create_microsite(microsite_fields())

        assert microsite.slug == "acme-corp"
        assert store.get_microsite_by_id(microsite.id) is None

    def test_invalid_rows_survive_writes(self, tmp_path):
        """Rows that don't validate are hidden from reads but never dropped."""
        store = JsonFileStore(str(tmp_path))
        acme = store.create_microsite(microsite_fields())

        path = tmp_path / "microsites.json"
        rows = json.loads(path.read_text())
        legacy = {"id": "legacy", "slug": "legacy-co", "views": "n/a"}
        rows.append(legacy)
        path.write_text(json.dumps(rows))

        store.increment_views(acme.id, True)
        store.update_microsite(acme.id, {"headline": "Updated"})
        other = store.create_microsite(microsite_fields("Legacy Co"))

        stored = json.loads(path.read_text())
        assert legacy in stored
        assert {row["id"] for row in stored} == {acme.id, "legacy", other.id}
        assert {m.id for m in store.list_microsites()} == {other.id, acme.id}
        assert other.slug == "legacy-co-2"
        assert store.get_microsite_by_id(acme.id).views == 1

    def test_failed_replace_removes_temp_file(self, tmp_path, monkeypatch):
        def fail_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", fail_replace)
        store = JsonFileStore(str(tmp_path))

        store.create_microsite(microsite_fields())

        assert list(tmp_path.iterdir()) == []


class TestCreateStore:
    """Backend selection from configuration."""

    def test_memory_backend(self):
        assert isinstance(create_store(Settings(STORAGE_BACKEND="memory")), MemoryStore)

    def test_file_backend(self, tmp_path):
        store = create_store(Settings(STORAGE_BACKEND="file", DATA_DIR=str(tmp_path)))

        assert isinstance(store, JsonFileStore)
        assert store.data_dir == tmp_path

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_store(Settings(STORAGE_BACKEND="redis"))

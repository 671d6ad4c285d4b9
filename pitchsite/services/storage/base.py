"""
Record store interface.
Every operation is implemented once here on top of two backend primitives,
_read(collection) and _write(collection, data).
"""

from abc import ABC, abstractmethod
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError
import structlog

from ...models.schemas import (
    Campaign,
    CampaignCreate,
    IntegrationSettings,
    Lead,
    LeadCreate,
    Microsite,
    MicrositeCreate,
    MicrositeStatus,
    Visit,
    new_record_id,
    utc_now,
)
from ...utils import create_slug, disambiguate_slug

logger = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=BaseModel)

MICROSITES = "microsites"
LEADS = "leads"
VISITS = "visits"
CAMPAIGNS = "campaigns"
SETTINGS = "settings"

# Never changed by a partial update
IMMUTABLE_MICROSITE_FIELDS = {"id", "created_at"}


class RecordStore(ABC):
    """
    Persistence for microsites, leads, visits, campaigns and integration settings.

    Read-modify-write sequences run under one re-entrant lock per store, so
    counters stay exact under concurrent requests within a process. Rows that
    no longer validate are hidden from reads but written back untouched.
    """

    def __init__(self):
        self._lock = threading.RLock()

    # === Backend primitives ===

    @abstractmethod
    def _read(self, collection: str) -> Any:
        """Stored JSON-compatible data for a collection, or None if absent/unreadable."""

    @abstractmethod
    def _write(self, collection: str, data: Any) -> None:
        """Replace a collection's stored data."""

    @abstractmethod
    def reset(self) -> None:
        """Remove all stored data."""

    # === Helpers ===

    def _raw_rows(self, collection: str) -> List[Any]:
        data = self._read(collection)
        return data if isinstance(data, list) else []

    def _parse(self, collection: str, model: Type[ModelT], row: Any) -> Optional[ModelT]:
        if not isinstance(row, dict):
            return None
        try:
            return model.model_validate(row)
        except ValidationError as e:
            logger.warning("store_row_skipped", collection=collection, row_id=row.get("id"), error=str(e))
            return None

    def _load(self, collection: str, model: Type[ModelT]) -> List[ModelT]:
        records = (self._parse(collection, model, row) for row in self._raw_rows(collection))
        return [record for record in records if record is not None]

    def _append(self, collection: str, record: BaseModel) -> None:
        with self._lock:
            rows = self._raw_rows(collection)
            rows.append(record.model_dump(mode="json"))
            self._write(collection, rows)

    def _update_one(
        self,
        collection: str,
        model: Type[ModelT],
        match: Callable[[ModelT], bool],
        change: Callable[[ModelT], ModelT]
    ) -> Optional[ModelT]:
        with self._lock:
            rows = self._raw_rows(collection)
            for i, row in enumerate(rows):
                record = self._parse(collection, model, row)
                if record is None or not match(record):
                    continue
                updated = change(record)
                rows[i] = updated.model_dump(mode="json")
                self._write(collection, rows)
                return updated
        return None

    # === Settings ===

    def get_settings(self) -> IntegrationSettings:
        data = self._read(SETTINGS)
        if not isinstance(data, dict):
            return IntegrationSettings()
        try:
            return IntegrationSettings.model_validate(data)
        except ValidationError as e:
            logger.warning("store_settings_invalid", error=str(e))
            return IntegrationSettings()

    def save_settings(self, partial: Dict[str, Any]) -> IntegrationSettings:
        """Merge partial into the stored settings and return the result."""
        with self._lock:
            current = self.get_settings()
            merged = IntegrationSettings.model_validate({**current.model_dump(), **partial})
            self._write(SETTINGS, merged.model_dump(mode="json"))
            return merged

    # === Campaigns ===

    def create_campaign(self, fields: Union[CampaignCreate, Dict[str, Any]]) -> Campaign:
        if isinstance(fields, dict):
            fields = CampaignCreate.model_validate(fields)

        campaign = Campaign(**fields.model_dump(), id=new_record_id())
        self._append(CAMPAIGNS, campaign)

        logger.info("campaign_created", campaign_id=campaign.id, name=campaign.name)
        return campaign

    def list_campaigns(self) -> List[Campaign]:
        """All campaigns, newest first."""
        return sorted(self._load(CAMPAIGNS, Campaign), key=lambda c: c.created_at, reverse=True)

    def get_campaign_by_id(self, campaign_id: str) -> Optional[Campaign]:
        return next((c for c in self._load(CAMPAIGNS, Campaign) if c.id == campaign_id), None)

    # === Microsites ===

    def list_microsites(
        self,
        status: Optional[MicrositeStatus] = None,
        campaign_id: Optional[str] = None
    ) -> List[Microsite]:
        """All microsites, newest first, optionally filtered by status and campaign."""
        microsites = self._load(MICROSITES, Microsite)
        if status is not None:
            microsites = [m for m in microsites if m.status == status]
        if campaign_id is not None:
            microsites = [m for m in microsites if m.campaign_id == campaign_id]
        return sorted(microsites, key=lambda m: m.created_at, reverse=True)

    def get_microsite_by_slug(self, slug: str) -> Optional[Microsite]:
        return next((m for m in self._load(MICROSITES, Microsite) if m.slug == slug), None)

    def get_microsite_by_id(self, microsite_id: str) -> Optional[Microsite]:
        return next((m for m in self._load(MICROSITES, Microsite) if m.id == microsite_id), None)

    def create_microsite(self, fields: Union[MicrositeCreate, Dict[str, Any]]) -> Microsite:
        """
        Persist a new microsite.

        Args:
            fields: Creation fields; slug defaults to one derived from the company name

        Returns:
            The stored Microsite with id, a unique slug and zeroed counters
        """
        if isinstance(fields, dict):
            fields = MicrositeCreate.model_validate(fields)

        with self._lock:
            # Slugs of rows that fail validation still count as taken
            taken = {row.get("slug") for row in self._raw_rows(MICROSITES) if isinstance(row, dict)}
            base = create_slug(fields.slug or fields.target_company_name)
            slug = disambiguate_slug(base, taken)

            microsite = Microsite(
                **fields.model_dump(exclude={"slug"}),
                id=new_record_id(),
                slug=slug,
            )
            self._append(MICROSITES, microsite)

        logger.info("microsite_created", microsite_id=microsite.id, slug=slug)
        return microsite

    def update_microsite(self, microsite_id: str, partial: Dict[str, Any]) -> Optional[Microsite]:
        """
        Shallow-merge partial into a microsite. Returns None if it doesn't exist.

        Publishing without an explicit published_at stamps the current time.
        """
        changes = {k: v for k, v in partial.items() if k not in IMMUTABLE_MICROSITE_FIELDS}

        def apply(microsite: Microsite) -> Microsite:
            updated = Microsite.model_validate({**microsite.model_dump(), **changes})
            if updated.status == MicrositeStatus.PUBLISHED and updated.published_at is None:
                updated = updated.model_copy(update={"published_at": utc_now()})
            return updated

        return self._update_one(MICROSITES, Microsite, lambda m: m.id == microsite_id, apply)

    def delete_microsite(self, microsite_id: str) -> bool:
        """Deletion is not supported; always reports nothing deleted."""
        logger.info("microsite_delete_ignored", microsite_id=microsite_id)
        return False

    def increment_views(self, microsite_id: str, is_unique: bool) -> Optional[Microsite]:
        def bump(microsite: Microsite) -> Microsite:
            return microsite.model_copy(update={
                "views": microsite.views + 1,
                "unique_visitors": microsite.unique_visitors + (1 if is_unique else 0),
            })

        return self._update_one(MICROSITES, Microsite, lambda m: m.id == microsite_id, bump)

    # === Leads ===

    def list_leads(self, microsite_id: Optional[str] = None) -> List[Lead]:
        leads = self._load(LEADS, Lead)
        if microsite_id is not None:
            leads = [lead for lead in leads if lead.microsite_id == microsite_id]
        return sorted(leads, key=lambda lead: lead.created_at, reverse=True)

    def create_lead(self, fields: Union[LeadCreate, Dict[str, Any]]) -> Lead:
        if isinstance(fields, dict):
            fields = LeadCreate.model_validate(fields)

        lead = Lead(**fields.model_dump(), id=new_record_id())
        self._append(LEADS, lead)

        logger.info("lead_created", lead_id=lead.id, microsite_id=lead.microsite_id)
        return lead

    # === Visits ===

    def list_visits(self, microsite_id: Optional[str] = None) -> List[Visit]:
        """Visits, newest first."""
        visits = self._load(VISITS, Visit)
        if microsite_id is not None:
            visits = [v for v in visits if v.microsite_id == microsite_id]
        return sorted(visits, key=lambda v: v.created_at, reverse=True)

    def get_visit_by_visitor(self, microsite_id: str, visitor_id: str) -> Optional[Visit]:
        return next(
            (v for v in self._load(VISITS, Visit)
             if v.microsite_id == microsite_id and v.visitor_id == visitor_id),
            None
        )

    def create_visit(self, fields: Dict[str, Any]) -> Visit:
        visit = Visit.model_validate({"id": new_record_id(), "page_views": 1, **fields})
        self._append(VISITS, visit)
        return visit

    def increment_page_views(self, microsite_id: str, visitor_id: str) -> Optional[Visit]:
        return self._update_one(
            VISITS,
            Visit,
            lambda v: v.microsite_id == microsite_id and v.visitor_id == visitor_id,
            lambda v: v.model_copy(update={"page_views": v.page_views + 1})
        )

    def record_pageview(
        self,
        microsite_id: str,
        visitor_id: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        referrer: Optional[str] = None
    ) -> Tuple[Visit, bool]:
        """
        Upsert the visit for (microsite, visitor) and bump the microsite counters.

        Returns:
            Tuple of (visit, is_unique) where is_unique is True for a first visit
        """
        with self._lock:
            visit = self.increment_page_views(microsite_id, visitor_id)
            is_unique = visit is None
            if is_unique:
                visit = self.create_visit({
                    "microsite_id": microsite_id,
                    "visitor_id": visitor_id,
                    "ip_address": ip_address,
                    "user_agent": user_agent,
                    "referrer": referrer,
                })
            self.increment_views(microsite_id, is_unique)
        return visit, is_unique

    def mark_cta_click(self, microsite_id: str, visitor_id: str) -> Optional[Visit]:
        return self._update_one(
            VISITS,
            Visit,
            lambda v: v.microsite_id == microsite_id and v.visitor_id == visitor_id,
            lambda v: v.model_copy(update={"cta_clicked": True})
        )

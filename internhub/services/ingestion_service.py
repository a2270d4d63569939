"""
Listing Ingestion - pull third-party internship listings into the catalog.

Calls the Apify LinkedIn job scraper actor for "<category> internship" in
India, maps each listing to an internship row and inserts it keyed by the
provider's job id. Listings already in the catalog are skipped.

LinkedIn does not publish stipend or duration, so ingested rows get
stipend 0, a 3 month duration and a deadline 30 days out.
"""

import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import httpx

from internhub.core import clock
from internhub.core.config import get_settings
from internhub.core.errors import StoreError
from internhub.models import INDIA
from internhub.services.entity_store import EntityStore, get_entity_store

settings = get_settings()
logger = logging.getLogger(__name__)

DEFAULT_DURATION_MONTHS = 3
DEFAULT_DEADLINE_DAYS = 30


def listing_to_internship(listing: Dict[str, Any], category: str, today: date) -> Optional[Dict[str, Any]]:
    """Map one provider listing to internship columns. None if it has no job id."""
    external_id = listing.get("jobId")
    if not external_id:
        return None

    title = listing.get("title") or ""
    return {
        "title": title,
        "company": listing.get("company") or "",
        "company_logo": listing.get("companyLogo"),
        "category": category,
        "description": listing.get("description") or "",
        "responsibilities": listing.get("responsibilities") or [],
        "requirements": listing.get("requirements") or [],
        "location": {"city": listing.get("location") or "", "state": "", "country": INDIA},
        "stipend": 0,
        "duration_months": DEFAULT_DURATION_MONTHS,
        "deadline": today + timedelta(days=DEFAULT_DEADLINE_DAYS),
        "is_remote": "remote" in title.lower(),
        "skills": listing.get("skills") or [],
        "external_id": str(external_id),
        "external_url": listing.get("url"),
    }


class ListingIngestionService:
    """
    Wrapper around the listing provider.

    A client is opened per fetch and closed when the fetch ends. The transport
    can be swapped out, e.g. for httpx.MockTransport.
    """

    def __init__(self, store: EntityStore, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.store = store
        self.transport = transport

    async def _fetch_listings(self, category: str) -> List[Dict[str, Any]]:
        if not settings.apify_token:
            raise StoreError("Listing ingestion is not configured.")

        url = f"{settings.apify_base_url}/acts/{settings.apify_actor}/run-sync-get-dataset-items"
        payload = {
            "keyword": f"{category} internship".strip(),
            "location": INDIA,
            "maxItems": settings.ingestion_max_items,
        }
        try:
            async with httpx.AsyncClient(
                timeout=settings.ingestion_timeout_seconds, transport=self.transport
            ) as client:
                response = await client.post(url, params={"token": settings.apify_token}, json=payload)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Listing provider request failed: %s", e)
            raise StoreError("Could not fetch new internships right now.") from e

        if not isinstance(data, list):
            raise StoreError("The listing provider returned an unexpected response.")
        return data

    async def ingest(self, category: str = "", today: Optional[date] = None) -> int:
        """
        Fetch listings for a category and store the new ones.

        Returns:
            Number of internships newly added to the catalog
        """
        today = today or clock.today()
        listings = await self._fetch_listings(category)

        rows = []
        for listing in listings:
            row = listing_to_internship(listing, category, today)
            if row is not None:
                rows.append(row)

        inserted = self.store.insert_external_internships(rows) if rows else 0
        logger.info(
            "Ingested %d new internships for category '%s' (%d fetched)", inserted, category, len(listings)
        )
        return inserted


# Singleton instance
_ingestion_service: ListingIngestionService = None


def get_ingestion_service() -> ListingIngestionService:
    """Get or create the ingestion service (singleton pattern). Also a FastAPI dependency."""
    global _ingestion_service
    if _ingestion_service is None:
        _ingestion_service = ListingIngestionService(get_entity_store())
    return _ingestion_service

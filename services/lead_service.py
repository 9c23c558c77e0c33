"""
Lead service for pipeline and client operations.

Status changes are written to the activity log so the lead detail view can
show how a lead moved through the board.
"""

from typing import Optional
import structlog

from config import get_supabase_client, get_settings
from models.lead import (
    ActivityResponse,
    ActivityType,
    LeadCreate,
    LeadDetailResponse,
    LeadResponse,
    LeadStatus,
    LeadUpdate,
)
from exceptions import LeadNotFoundError, DatabaseError

logger = structlog.get_logger(__name__)

# Columns searched by the clients list
CLIENT_SEARCH_FIELDS = ("name", "email", "phone", "address", "city")


class LeadService:
    """
    Lead business logic.

    Handles CRUD, status moves and the activity log.
    """

    def __init__(self):
        settings = get_settings()
        self.db = get_supabase_client()
        self.table = settings.leads_table
        self.activities_table = settings.activities_table

    # ===================
    # READ OPERATIONS
    # ===================

    def get_all(
        self,
        page: int = 1,
        page_size: int = 50,
        status: Optional[LeadStatus] = None,
        search: Optional[str] = None,
    ) -> tuple[list[LeadResponse], int]:
        """
        Get leads, newest first.

        Args:
            page: Page number (1-indexed)
            page_size: Items per page
            status: Only leads in this pipeline stage
            search: Case-insensitive match on name, email, phone, address, city

        Returns:
            Tuple of (leads list, total count)
        """
        logger.info(
            "getting_leads",
            page=page,
            page_size=page_size,
            status=status,
            search=bool(search)
        )

        try:
            query = self.db.table(self.table).select("*", count="exact")

            if status:
                query = query.eq("status", status.value)
            if search:
                query = query.or_(_search_filter(search))

            offset = (page - 1) * page_size
            query = query.order("created_at", desc=True).range(offset, offset + page_size - 1)

            result = query.execute()

            leads = [LeadResponse(**row) for row in result.data]
            total = result.count or 0

            logger.info("leads_retrieved", count=len(leads), total=total)

            return leads, total

        except Exception as e:
            logger.error("get_leads_failed", error=str(e))
            raise DatabaseError("select", str(e))

    def get_clients(self, search: Optional[str] = None) -> list[LeadResponse]:
        """
        Get active clients (leads that were won).

        Search is applied in memory, matching the way the clients screen
        filters: case-insensitive on text fields, verbatim on phone.
        """
        leads, _ = self.get_all(page=1, page_size=1000, status=LeadStatus.WON)
        if not search:
            return leads

        needle = search.lower()
        return [
            lead for lead in leads
            if any(
                needle in (getattr(lead, f) or "").lower()
                for f in CLIENT_SEARCH_FIELDS if f != "phone"
            )
            or search in (lead.phone or "")
        ]

    def get_by_id(self, lead_id: int) -> LeadDetailResponse:
        """
        Get a single lead with its activity log.

        Raises:
            LeadNotFoundError: If lead doesn't exist
        """
        logger.debug("getting_lead", lead_id=lead_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", lead_id)
                .execute()
            )
        except Exception as e:
            logger.error("get_lead_failed", lead_id=lead_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            raise LeadNotFoundError(lead_id)

        return LeadDetailResponse(
            **result.data[0],
            activities=self.get_activities(lead_id)
        )

    def get_activities(self, lead_id: int) -> list[ActivityResponse]:
        """Activity log for a lead, newest first."""
        try:
            result = (
                self.db.table(self.activities_table)
                .select("*")
                .eq("lead_id", lead_id)
                .order("created_at", desc=True)
                .execute()
            )
            return [ActivityResponse(**row) for row in result.data]
        except Exception as e:
            logger.error("get_activities_failed", lead_id=lead_id, error=str(e))
            raise DatabaseError("select", str(e))

    # ===================
    # WRITE OPERATIONS
    # ===================

    def create(self, data: LeadCreate) -> LeadResponse:
        """Create a new lead."""
        logger.info("creating_lead", source=data.source)

        try:
            result = (
                self.db.table(self.table)
                .insert(data.model_dump(mode="json", exclude_none=True))
                .execute()
            )
            lead = LeadResponse(**result.data[0])
            logger.info("lead_created", lead_id=lead.id)
            return lead

        except Exception as e:
            logger.error("create_lead_failed", error=str(e))
            raise DatabaseError("insert", str(e))

    def update(self, lead_id: int, data: LeadUpdate) -> LeadResponse:
        """
        Update lead fields (not status).

        Raises:
            LeadNotFoundError: If lead doesn't exist
        """
        logger.info("updating_lead", lead_id=lead_id)

        update_data = data.model_dump(mode="json", exclude_unset=True)
        if not update_data:
            return self.get_by_id(lead_id)

        rows = self._update_row(lead_id, update_data)
        logger.info("lead_updated", lead_id=lead_id, fields=sorted(update_data))
        return LeadResponse(**rows[0])

    def update_status(self, lead_id: int, status: LeadStatus) -> LeadResponse:
        """
        Move a lead to another pipeline stage and log it.

        Raises:
            LeadNotFoundError: If lead doesn't exist
        """
        logger.info("updating_lead_status", lead_id=lead_id, status=status.value)

        rows = self._update_row(lead_id, {"status": status.value})
        self.add_activity(
            lead_id,
            f"Status updated to {status.value}",
            ActivityType.STATUS_CHANGE
        )
        return LeadResponse(**rows[0])

    def add_activity(
        self,
        lead_id: int,
        content: str,
        activity_type: ActivityType = ActivityType.NOTE
    ) -> ActivityResponse:
        """Append an entry to a lead's activity log."""
        try:
            result = (
                self.db.table(self.activities_table)
                .insert({
                    "lead_id": lead_id,
                    "type": activity_type.value,
                    "content": content,
                })
                .execute()
            )
            return ActivityResponse(**result.data[0])
        except Exception as e:
            logger.error(
                "add_activity_failed",
                lead_id=lead_id,
                type=activity_type.value,
                error=str(e)
            )
            raise DatabaseError("insert", str(e))

    def delete(self, lead_id: int) -> None:
        """
        Delete a lead (hard delete).

        Raises:
            LeadNotFoundError: If lead doesn't exist
        """
        logger.info("deleting_lead", lead_id=lead_id)

        try:
            result = self.db.table(self.table).delete().eq("id", lead_id).execute()
        except Exception as e:
            logger.error("delete_lead_failed", lead_id=lead_id, error=str(e))
            raise DatabaseError("delete", str(e))

        if not result.data:
            raise LeadNotFoundError(lead_id)

        logger.info("lead_deleted", lead_id=lead_id)

    # ===================
    # HELPERS
    # ===================

    def _update_row(self, lead_id: int, update_data: dict) -> list[dict]:
        try:
            result = (
                self.db.table(self.table)
                .update(update_data)
                .eq("id", lead_id)
                .execute()
            )
        except Exception as e:
            logger.error("update_lead_failed", lead_id=lead_id, error=str(e))
            raise DatabaseError("update", str(e))

        if not result.data:
            raise LeadNotFoundError(lead_id)
        return result.data


def _search_filter(search: str) -> str:
    """PostgREST or() filter matching search on every client search field."""
    # Commas and parentheses delimit or() terms
    term = search.replace(",", " ").replace("(", " ").replace(")", " ").strip()
    return ",".join(f"{f}.ilike.%{term}%" for f in CLIENT_SEARCH_FIELDS)


# Singleton instance for convenience
_lead_service: Optional[LeadService] = None


def get_lead_service() -> LeadService:
    """Get or create LeadService instance."""
    global _lead_service
    if _lead_service is None:
        _lead_service = LeadService()
    return _lead_service

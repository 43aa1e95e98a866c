"""Procurement step service for CRUD operations.

Reads join the parent contract number and the assignee email for display.
"""

from typing import Any

from core.models import ProcurementStep
from core.services.base import CrudService


class ProcurementService(CrudService[ProcurementStep]):
    """Service for procurement step operations."""

    ENTITY = "Procurement step"
    TABLE = "procurement_steps"
    MODEL = ProcurementStep
    WRITABLE_COLUMNS = (
        "step_name", "contract_id", "status", "step_description",
        "due_date", "assigned_to_user_id",
    )
    SORTABLE_COLUMNS = frozenset({"step_name", "status", "due_date", "created_at", "updated_at"})
    FILTERABLE_COLUMNS = frozenset({"contract_id", "status", "assigned_to_user_id"})
    SEARCH_COLUMNS = ("step_name", "step_description")

    def _select_sql(self) -> str:
        return """
            SELECT t.*,
                   c.contract_number AS contract_number,
                   u.email AS assigned_user_email
            FROM procurement_steps t
            LEFT JOIN contracts c ON c.id = t.contract_id
            LEFT JOIN users u ON u.id = t.assigned_to_user_id
        """

    def label(self, row: dict[str, Any]) -> str:
        return row["step_name"]

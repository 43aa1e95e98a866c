"""Task service for CRUD operations.

Reads join the linked contract number, linked client name and the
assignee email for display.
"""

from typing import Any

from core.models import Task
from core.services.base import CrudService


class TaskService(CrudService[Task]):
    """Service for task operations."""

    ENTITY = "Task"
    TABLE = "tasks"
    MODEL = Task
    WRITABLE_COLUMNS = (
        "title", "priority", "status", "description", "due_date",
        "linked_contract_id", "linked_client_id", "assigned_to_user_id",
    )
    SORTABLE_COLUMNS = frozenset({"title", "priority", "status", "due_date", "created_at", "updated_at"})
    FILTERABLE_COLUMNS = frozenset({
        "status", "priority", "linked_contract_id", "linked_client_id", "assigned_to_user_id",
    })
    SEARCH_COLUMNS = ("title", "description")

    def _select_sql(self) -> str:
        return """
            SELECT t.*,
                   c.contract_number AS contract_number,
                   cl.name AS client_name,
                   u.email AS assigned_user_email
            FROM tasks t
            LEFT JOIN contracts c ON c.id = t.linked_contract_id
            LEFT JOIN clients cl ON cl.id = t.linked_client_id
            LEFT JOIN users u ON u.id = t.assigned_to_user_id
        """

    def label(self, row: dict[str, Any]) -> str:
        return row["title"]

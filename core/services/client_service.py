"""
Client service for CRUD operations.

Clients are the organizations contracts are signed with. Names are unique,
and a client cannot be deleted while contracts or tasks still reference it.
"""

from typing import Any

from core.models import Client, ClientCreate
from core.services.base import CrudService


class ClientService(CrudService[Client]):
    """Service for client operations."""

    ENTITY = "Client"
    TABLE = "clients"
    MODEL = Client
    WRITABLE_COLUMNS = (
        "name", "contact_person", "contact_email", "contact_phone", "address",
    )
    SORTABLE_COLUMNS = frozenset({"name", "created_at", "updated_at"})
    SEARCH_COLUMNS = ("name", "contact_person", "contact_email")
    DEFAULT_SORT = "name"
    DEFAULT_DESCENDING = False

    def _conflict_message(self, data: ClientCreate) -> str:
        return f'Client with name "{data.name}" already exists. Please use a unique name.'

    def _in_use_message(self, entity_id) -> str:
        return (
            f'Client "{entity_id}" cannot be deleted as it has associated records '
            "(e.g., contracts). Delete associated records first."
        )

    def label(self, row: dict[str, Any]) -> str:
        return row["name"]

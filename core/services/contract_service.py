"""Contract service for CRUD operations."""

from typing import Any

from core.models import Contract, ContractCreate
from core.services.base import CrudService


class ContractService(CrudService[Contract]):
    """Service for contract operations. Contract numbers are unique."""

    ENTITY = "Contract"
    TABLE = "contracts"
    MODEL = Contract
    WRITABLE_COLUMNS = (
        "contract_number", "client_id", "contract_status", "payment_type",
        "is_moins_disant", "bc_date", "delivery_deadline_date", "tuneps_number",
        "contract_value", "description", "assigned_user_id",
    )
    SORTABLE_COLUMNS = frozenset({
        "contract_number", "contract_status", "bc_date", "delivery_deadline_date",
        "contract_value", "created_at", "updated_at",
    })
    FILTERABLE_COLUMNS = frozenset({"client_id", "contract_status", "payment_type", "assigned_user_id"})
    SEARCH_COLUMNS = ("contract_number", "tuneps_number", "description")

    def _conflict_message(self, data: ContractCreate) -> str:
        return "Contract Number already exists. Please use a unique number."

    def _in_use_message(self, entity_id) -> str:
        return (
            f"Contract {entity_id} cannot be deleted as it has associated records "
            "(e.g., procurement steps or tasks). Delete associated records first."
        )

    def label(self, row: dict[str, Any]) -> str:
        return row["contract_number"]

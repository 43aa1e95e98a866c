"""Tests for the concrete entity services - joins, filters and wording."""

from decimal import Decimal
from uuid import uuid4

import psycopg2.errors
import pytest

from core.exceptions import ResourceConflictError, ResourceInUseError
from core.models import ContractCreate, ProcurementStepCreate, TaskCreate
from core.services.client_service import ClientService
from core.services.contract_service import ContractService
from core.services.procurement_service import ProcurementService
from core.services.task_service import TaskService
from utils.timezone import now_utc


def contract_row(**overrides):
    now = now_utc()
    row = {
        "id": uuid4(),
        "contract_number": "C-2024-001",
        "client_id": uuid4(),
        "contract_status": "procurement",
        "payment_type": "wire",
        "is_moins_disant": False,
        "bc_date": None,
        "delivery_deadline_date": None,
        "tuneps_number": None,
        "contract_value": Decimal("1500.00"),
        "description": None,
        "assigned_user_id": None,
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


def step_row(**overrides):
    now = now_utc()
    row = {
        "id": uuid4(),
        "step_name": "Request quotes",
        "contract_id": uuid4(),
        "status": "pending",
        "step_description": None,
        "due_date": None,
        "assigned_to_user_id": None,
        "created_at": now,
        "updated_at": now,
        "contract_number": "C-2024-001",
        "assigned_user_email": "buyer@example.com",
    }
    row.update(overrides)
    return row


def task_row(**overrides):
    now = now_utc()
    row = {
        "id": uuid4(),
        "title": "Call supplier",
        "priority": "high",
        "status": "to_do",
        "description": None,
        "due_date": None,
        "linked_contract_id": None,
        "linked_client_id": None,
        "assigned_to_user_id": None,
        "created_at": now,
        "updated_at": now,
        "contract_number": None,
        "client_name": "Acme",
        "assigned_user_email": None,
    }
    row.update(overrides)
    return row


class TestClientService:

    def test_delete_blocked_message(self, mock_postgres):
        mock_postgres.execute_returning.side_effect = psycopg2.errors.ForeignKeyViolation("fk")

        with pytest.raises(ResourceInUseError, match=r"\(e\.g\., contracts\)"):
            ClientService(mock_postgres).delete(uuid4())


class TestContractService:

    def test_create_serializes_enums_dates_and_decimal(self, mock_postgres):
        row = contract_row()
        mock_postgres.execute_returning.return_value = [{"id": row["id"]}]
        mock_postgres.execute_single.return_value = row
        data = ContractCreate(
            contract_number="C-2024-001",
            client_id=row["client_id"],
            contract_status="clearing_customs",
            payment_type="traite",
            bc_date="2024-03-01",
            contract_value="1500.00",
        )

        ContractService(mock_postgres).create(data)

        _, params = mock_postgres.execute_returning.call_args.args
        assert "clearing_customs" in params
        assert "traite" in params
        assert "2024-03-01" in params
        assert "1500.00" in params
        assert str(row["client_id"]) in params

    def test_duplicate_number_message(self, mock_postgres):
        mock_postgres.execute_returning.side_effect = psycopg2.errors.UniqueViolation("dup")
        data = ContractCreate(
            contract_number="C-1", client_id=uuid4(),
            contract_status="procurement", payment_type="check",
        )

        with pytest.raises(
            ResourceConflictError,
            match="Contract Number already exists. Please use a unique number.",
        ):
            ContractService(mock_postgres).create(data)

    def test_filter_by_status(self, mock_postgres):
        mock_postgres.execute.return_value = [contract_row(contract_status="delivered")]

        contracts = ContractService(mock_postgres).list_all(filters={"contract_status": "delivered"})

        sql, params = mock_postgres.execute.call_args.args
        assert "t.contract_status = %s" in sql
        assert params[0] == "delivered"
        assert contracts[0].contract_status.value == "delivered"

    def test_default_sort_newest_first(self, mock_postgres):
        mock_postgres.execute.return_value = []

        ContractService(mock_postgres).list_all()

        sql, _ = mock_postgres.execute.call_args.args
        assert "ORDER BY t.created_at DESC" in sql

    def test_label_is_contract_number(self, mock_postgres):
        assert ContractService(mock_postgres).label(contract_row()) == "C-2024-001"


class TestProcurementService:

    def test_reads_join_contract_and_assignee(self, mock_postgres):
        row = step_row()
        mock_postgres.execute_single.return_value = row

        step = ProcurementService(mock_postgres).get(row["id"])

        sql, _ = mock_postgres.execute_single.call_args.args
        assert "LEFT JOIN contracts c" in sql
        assert "LEFT JOIN users u" in sql
        assert step.contract_number == "C-2024-001"
        assert step.assigned_user_email == "buyer@example.com"

    def test_filter_by_contract(self, mock_postgres):
        contract_id = uuid4()
        mock_postgres.execute.return_value = [step_row(contract_id=contract_id)]

        steps = ProcurementService(mock_postgres).list_all(filters={"contract_id": str(contract_id)})

        sql, params = mock_postgres.execute.call_args.args
        assert "t.contract_id = %s" in sql
        assert steps[0].contract_id == contract_id

    def test_create_writes_step_columns(self, mock_postgres):
        row = step_row()
        mock_postgres.execute_returning.return_value = [{"id": row["id"]}]
        mock_postgres.execute_single.return_value = row

        ProcurementService(mock_postgres).create(
            ProcurementStepCreate(step_name="Request quotes", contract_id=row["contract_id"], status="pending")
        )

        sql, _ = mock_postgres.execute_returning.call_args.args
        assert sql.startswith("INSERT INTO procurement_steps (id, step_name, contract_id, status")


class TestTaskService:

    def test_reads_join_display_fields(self, mock_postgres):
        row = task_row()
        mock_postgres.execute_single.return_value = row

        task = TaskService(mock_postgres).get(row["id"])

        sql, _ = mock_postgres.execute_single.call_args.args
        assert "LEFT JOIN clients cl" in sql
        assert task.client_name == "Acme"

    def test_create_with_client_link(self, mock_postgres):
        client_id = uuid4()
        row = task_row(linked_client_id=client_id)
        mock_postgres.execute_returning.return_value = [{"id": row["id"]}]
        mock_postgres.execute_single.return_value = row

        task = TaskService(mock_postgres).create(
            TaskCreate(title="Call supplier", priority="high", status="to_do", linked_client_id=client_id)
        )

        _, params = mock_postgres.execute_returning.call_args.args
        assert str(client_id) in params
        assert task.linked_client_id == client_id

    def test_filter_by_priority_and_status(self, mock_postgres):
        mock_postgres.execute.return_value = []

        TaskService(mock_postgres).list_all(filters={"priority": "high", "status": "to_do"})

        sql, params = mock_postgres.execute.call_args.args
        assert "t.priority = %s AND t.status = %s" in sql
        assert params[:2] == ("high", "to_do")

    def test_search_title_and_description(self, mock_postgres):
        mock_postgres.execute.return_value = []

        TaskService(mock_postgres).list_all(search="supplier")

        sql, _ = mock_postgres.execute.call_args.args
        assert "t.title ILIKE %s OR t.description ILIKE %s" in sql

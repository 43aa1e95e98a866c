"""Tests for CrudService - SQL construction and integrity error translation.

Exercised through ClientService, the simplest concrete entity.
"""

from uuid import UUID, uuid4

import psycopg2.errors
import pytest

from core.exceptions import (
    InvalidReferenceError,
    ResourceConflictError,
    ResourceInUseError,
    ResourceNotFoundError,
)
from core.models import ClientCreate, ClientUpdate
from core.services.base import foreign_key_field
from core.services.client_service import ClientService
from utils.timezone import now_utc


def client_row(**overrides):
    now = now_utc()
    row = {
        "id": uuid4(),
        "name": "Acme",
        "contact_person": None,
        "contact_email": None,
        "contact_phone": None,
        "address": None,
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


@pytest.fixture
def service(mock_postgres):
    return ClientService(mock_postgres)


class TestCreate:

    def test_inserts_writable_columns_and_reads_back(self, service, mock_postgres):
        row = client_row(name="Acme", contact_person="Jane")
        mock_postgres.execute_returning.return_value = [{"id": row["id"]}]
        mock_postgres.execute_single.return_value = row

        client = service.create(ClientCreate(name="Acme", contact_person="Jane"))

        sql, params = mock_postgres.execute_returning.call_args.args
        assert sql.startswith("INSERT INTO clients (id, name, contact_person")
        assert "RETURNING id" in sql
        assert isinstance(params[0], UUID)
        assert params[1:6] == ("Acme", "Jane", None, None, None)
        assert client.id == row["id"]
        assert client.contact_person == "Jane"

    def test_unique_violation_becomes_conflict(self, service, mock_postgres):
        mock_postgres.execute_returning.side_effect = psycopg2.errors.UniqueViolation(
            'duplicate key value violates unique constraint "clients_name_key"'
        )

        with pytest.raises(ResourceConflictError, match='Client with name "Acme" already exists'):
            service.create(ClientCreate(name="Acme"))


class TestGet:

    def test_get_by_id_missing_returns_none(self, service, mock_postgres):
        mock_postgres.execute_single.return_value = None

        assert service.get_by_id(uuid4()) is None

    def test_get_missing_raises_not_found(self, service, mock_postgres):
        mock_postgres.execute_single.return_value = None
        entity_id = uuid4()

        with pytest.raises(ResourceNotFoundError, match=f"Client {entity_id} not found"):
            service.get(entity_id)

    def test_get_selects_by_id(self, service, mock_postgres):
        row = client_row()
        mock_postgres.execute_single.return_value = row

        service.get(row["id"])

        sql, params = mock_postgres.execute_single.call_args.args
        assert "WHERE t.id = %s" in sql
        assert params == (row["id"],)


class TestUpdate:

    def test_updates_all_writable_columns(self, service, mock_postgres):
        row = client_row(name="Renamed")
        mock_postgres.execute_returning.return_value = [{"id": row["id"]}]
        mock_postgres.execute_single.return_value = row

        updated = service.update(row["id"], ClientUpdate(name="Renamed"))

        sql, params = mock_postgres.execute_returning.call_args.args
        assert sql.startswith("UPDATE clients SET name = %s, contact_person = %s")
        assert "updated_at = %s" in sql
        assert params[0] == "Renamed"
        assert params[-1] == row["id"]
        assert updated.name == "Renamed"

    def test_missing_row_raises_not_found(self, service, mock_postgres):
        mock_postgres.execute_returning.return_value = []

        with pytest.raises(ResourceNotFoundError):
            service.update(uuid4(), ClientUpdate(name="Ghost"))
        mock_postgres.execute_single.assert_not_called()

    def test_unique_violation_becomes_conflict(self, service, mock_postgres):
        mock_postgres.execute_returning.side_effect = psycopg2.errors.UniqueViolation("dup")

        with pytest.raises(ResourceConflictError):
            service.update(uuid4(), ClientUpdate(name="Taken"))


class TestDelete:

    def test_returns_deleted_row(self, service, mock_postgres):
        row = client_row(name="Acme")
        mock_postgres.execute_returning.return_value = [row]

        deleted = service.delete(row["id"])

        assert deleted == row
        assert service.label(deleted) == "Acme"
        sql, _ = mock_postgres.execute_returning.call_args.args
        assert sql.startswith("DELETE FROM clients WHERE id = %s")

    def test_missing_row_raises_not_found(self, service, mock_postgres):
        mock_postgres.execute_returning.return_value = []

        with pytest.raises(ResourceNotFoundError):
            service.delete(uuid4())

    def test_referenced_row_raises_in_use(self, service, mock_postgres):
        mock_postgres.execute_returning.side_effect = psycopg2.errors.ForeignKeyViolation(
            'update or delete on table "clients" violates foreign key constraint '
            '"contracts_client_id_fkey" on table "contracts"'
        )
        entity_id = uuid4()

        with pytest.raises(ResourceInUseError, match="cannot be deleted as it has associated records"):
            service.delete(entity_id)


class TestListAll:

    def test_defaults(self, service, mock_postgres):
        mock_postgres.execute.return_value = [client_row()]

        clients = service.list_all()

        sql, params = mock_postgres.execute.call_args.args
        assert "ORDER BY t.name ASC, t.id" in sql
        assert "WHERE" not in sql
        assert params == (100, 0)
        assert len(clients) == 1

    def test_search_uses_ilike_on_search_columns(self, service, mock_postgres):
        mock_postgres.execute.return_value = []

        service.list_all(search="acme")

        sql, params = mock_postgres.execute.call_args.args
        assert "t.name ILIKE %s OR t.contact_person ILIKE %s OR t.contact_email ILIKE %s" in sql
        assert params == ("%acme%", "%acme%", "%acme%", 100, 0)

    def test_sort_and_pagination(self, service, mock_postgres):
        mock_postgres.execute.return_value = []

        service.list_all(sort="created_at", descending=True, limit=10, offset=20)

        sql, params = mock_postgres.execute.call_args.args
        assert "ORDER BY t.created_at DESC" in sql
        assert params == (10, 20)

    def test_limit_capped(self, service, mock_postgres):
        mock_postgres.execute.return_value = []

        service.list_all(limit=10_000)

        _, params = mock_postgres.execute.call_args.args
        assert params == (500, 0)

    def test_unknown_sort_column_rejected(self, service, mock_postgres):
        with pytest.raises(ValueError, match="Cannot sort clients by 'password'"):
            service.list_all(sort="password")
        mock_postgres.execute.assert_not_called()

    def test_unknown_filter_rejected(self, service, mock_postgres):
        with pytest.raises(ValueError, match="Cannot filter clients by 'name'"):
            service.list_all(filters={"name": "Acme"})

    def test_bad_filter_value_rejected(self, mock_postgres):
        from core.services.contract_service import ContractService

        mock_postgres.execute.side_effect = psycopg2.errors.InvalidTextRepresentation(
            'invalid input value for enum contract_status: "shipped"'
        )

        with pytest.raises(ValueError, match="Invalid filter value for contracts"):
            ContractService(mock_postgres).list_all(filters={"contract_status": "shipped"})


class TestForeignKeyField:

    def test_reads_field_from_detail(self):
        exc = psycopg2.errors.ForeignKeyViolation(
            'insert or update on table "contracts" violates foreign key constraint '
            '"contracts_client_id_fkey"\nDETAIL:  Key (client_id)=(abc) is not present in table "clients".'
        )
        assert foreign_key_field(exc) == "client_id"

    def test_unknown_without_detail(self):
        assert foreign_key_field(psycopg2.errors.ForeignKeyViolation("violation")) is None


class TestReferenceErrors:

    def test_foreign_key_violation_on_write_names_field(self, mock_postgres):
        from core.models import ContractCreate
        from core.services.contract_service import ContractService

        mock_postgres.execute_returning.side_effect = psycopg2.errors.ForeignKeyViolation(
            'insert or update on table "contracts" violates foreign key constraint\n'
            'DETAIL:  Key (client_id)=(abc) is not present in table "clients".'
        )
        data = ContractCreate(
            contract_number="C-1", client_id=uuid4(),
            contract_status="procurement", payment_type="wire",
        )

        with pytest.raises(InvalidReferenceError) as exc_info:
            ContractService(mock_postgres).create(data)

        assert exc_info.value.field == "client_id"
        assert "client_id" in str(exc_info.value)

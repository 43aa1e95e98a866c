"""
Report service - headline counts and contract value totals.

Read-only aggregate queries over all entity tables.
"""

from decimal import Decimal

from clients.postgres_client import PostgresClient
from core.models import ReportSummary, StatusCount


class ReportService:
    """Service for the reports overview."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def summary(self) -> ReportSummary:
        """
        Entity counts, total contract value and contracts per status.

        Statuses with no contracts are omitted from contracts_by_status.
        """
        totals = self.postgres.execute_single(
            """
            SELECT
                (SELECT COUNT(*) FROM clients) AS total_clients,
                (SELECT COUNT(*) FROM contracts) AS total_contracts,
                (SELECT COUNT(*) FROM procurement_steps) AS total_procurement_steps,
                (SELECT COUNT(*) FROM tasks) AS total_tasks,
                (SELECT COALESCE(SUM(contract_value), 0) FROM contracts) AS total_contract_value
            """
        ) or {}

        by_status = self.postgres.execute(
            """
            SELECT contract_status, COUNT(*) AS count
            FROM contracts
            GROUP BY contract_status
            ORDER BY contract_status
            """
        )

        return ReportSummary(
            total_clients=totals.get("total_clients", 0),
            total_contracts=totals.get("total_contracts", 0),
            total_procurement_steps=totals.get("total_procurement_steps", 0),
            total_tasks=totals.get("total_tasks", 0),
            total_contract_value=totals.get("total_contract_value") or Decimal("0"),
            contracts_by_status=[StatusCount.model_validate(row) for row in by_status],
        )

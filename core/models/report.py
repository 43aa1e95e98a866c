"""Reporting read models."""

from decimal import Decimal

from pydantic import BaseModel

from core.models.contract import ContractStatus


class StatusCount(BaseModel):
    contract_status: ContractStatus
    count: int


class ReportSummary(BaseModel):
    """Headline numbers for the reports page."""

    total_clients: int
    total_contracts: int
    total_procurement_steps: int
    total_tasks: int
    total_contract_value: Decimal
    contracts_by_status: list[StatusCount]

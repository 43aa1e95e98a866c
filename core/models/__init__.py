"""Core domain models."""

from core.models.client import Client, ClientCreate, ClientUpdate
from core.models.contract import Contract, ContractCreate, ContractUpdate, ContractStatus, PaymentType
from core.models.procurement_step import (
    ProcurementStep,
    ProcurementStepCreate,
    ProcurementStepUpdate,
    ProcurementStatus,
)
from core.models.task import Task, TaskCreate, TaskUpdate, TaskPriority, TaskStatus
from core.models.user import AppUser
from core.models.report import ReportSummary, StatusCount

__all__ = [
    # Client
    "Client", "ClientCreate", "ClientUpdate",
    # Contract
    "Contract", "ContractCreate", "ContractUpdate", "ContractStatus", "PaymentType",
    # ProcurementStep
    "ProcurementStep", "ProcurementStepCreate", "ProcurementStepUpdate", "ProcurementStatus",
    # Task
    "Task", "TaskCreate", "TaskUpdate", "TaskPriority", "TaskStatus",
    # User
    "AppUser",
    # Reports
    "ReportSummary", "StatusCount",
]

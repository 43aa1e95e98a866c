"""API test fixtures - app with guard middleware and services over a mocked database."""

import pytest
from fastapi import FastAPI
from starlette.testclient import TestClient

from api.errors import register_error_handlers
from api.middleware import RequestIDMiddleware
from api.reports import create_reports_router
from api.resources import create_resources_router
from auth.guard import SessionGuard
from auth.security_middleware import SessionGuardMiddleware
from core.services.client_service import ClientService
from core.services.contract_service import ContractService
from core.services.procurement_service import ProcurementService
from core.services.report_service import ReportService
from core.services.task_service import TaskService


class NoSessionProvider:
    """The entity API is unclassified; no session is needed to reach it."""

    def lookup_session(self, cookies):
        return None


@pytest.fixture
def services(mock_postgres):
    return {
        "client": ClientService(mock_postgres),
        "contract": ContractService(mock_postgres),
        "procurement": ProcurementService(mock_postgres),
        "task": TaskService(mock_postgres),
    }


@pytest.fixture
def app(services, mock_postgres, guard_config):
    """FastAPI app with middleware, error handlers, and entity/report routes."""
    app = FastAPI()
    app.add_middleware(SessionGuardMiddleware, guard=SessionGuard(NoSessionProvider(), guard_config))
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    app.include_router(create_resources_router(services), prefix="/api")
    app.include_router(create_reports_router(ReportService(mock_postgres)), prefix="/api")

    return app


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)

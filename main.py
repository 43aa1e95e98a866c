"""Application factory.

Run with:
    uvicorn main:build_app --factory

build_app reads secrets from Vault (crm/database, crm/identity) and wires the
real clients; create_app takes already-built dependencies so tests can pass
mocks.
"""

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

from api.errors import register_error_handlers
from api.middleware import RequestIDMiddleware
from api.pages import create_pages_router
from api.reports import create_reports_router
from api.resources import create_resources_router
from auth.api import create_auth_router
from auth.config import GuardConfig, IdentityConfig
from auth.guard import SessionGuard
from auth.provider import SupabaseSessionProvider
from auth.security_middleware import SessionGuardMiddleware
from clients.identity_client import IdentityClient
from clients.postgres_client import PostgresClient
from clients.vault_client import get_database_url, get_identity_config
from core.services.client_service import ClientService
from core.services.contract_service import ContractService
from core.services.procurement_service import ProcurementService
from core.services.report_service import ReportService
from core.services.task_service import TaskService
from core.services.user_service import UserService

logger = logging.getLogger(__name__)


def create_app(
    *,
    postgres: PostgresClient,
    identity_client: IdentityClient,
    identity_config: IdentityConfig,
    guard_config: GuardConfig | None = None,
) -> FastAPI:
    """Assemble the CRM app from its dependencies."""
    guard_config = guard_config or GuardConfig()

    provider = SupabaseSessionProvider(identity_client, identity_config)
    guard = SessionGuard(provider, guard_config)

    services = {
        "client": ClientService(postgres),
        "contract": ContractService(postgres),
        "procurement": ProcurementService(postgres),
        "task": TaskService(postgres),
    }

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        logger.info("Shutting down, closing database pool")
        postgres.close()

    app = FastAPI(title="CRM", lifespan=lifespan)

    # Starlette runs the last-added middleware first: request IDs wrap the guard.
    app.add_middleware(SessionGuardMiddleware, guard=guard)
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    app.include_router(create_resources_router(services), prefix="/api")
    app.include_router(create_reports_router(ReportService(postgres)), prefix="/api")
    app.include_router(
        create_auth_router(provider, UserService(postgres), guard_config),
        prefix="/auth",
    )
    app.include_router(create_pages_router(guard_config))

    @app.get("/health", include_in_schema=False)
    async def health():
        return {"status": "ok"}

    return app


def build_app() -> FastAPI:
    """Production entry point: environment, logging and Vault-backed clients."""
    load_dotenv()
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    identity_settings = get_identity_config()
    identity_config = IdentityConfig(
        project_url=identity_settings["project_url"],
        anon_key=identity_settings["anon_key"],
        cookie_secure=os.getenv("COOKIE_SECURE", "true").lower() != "false",
    )
    identity_client = IdentityClient(
        identity_config.project_url,
        identity_config.anon_key,
        timeout_seconds=identity_config.request_timeout_seconds,
    )

    logger.info(f"Starting CRM (identity project {identity_config.project_ref})")
    return create_app(
        postgres=PostgresClient(get_database_url()),
        identity_client=identity_client,
        identity_config=identity_config,
    )

"""
FastAPI application factory.

Run with:
    uvicorn api.app:create_app --factory
"""

import logging
import os
import sys
import threading
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.access import create_access_router
from api.admin import create_admin_router
from api.errors import register_error_handlers
from api.health import create_health_router
from api.middleware import RequestIDMiddleware
from auth.admin_users import AdminUserService
from auth.api import create_admin_auth_router
from auth.config import AuthConfig
from auth.database import AdminUserDatabase
from auth.rate_limiter import RateLimiter
from auth.security_logger import SecurityLogger
from auth.security_middleware import AuthMiddleware
from auth.service import AdminAuthService
from auth.session import SessionManager
from clients.email_client import LogOnlyEmailClient, ResendEmailClient, create_email_client
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
from clients.vault_client import get_database_url, get_email_config, get_valkey_url
from core.audit import AuditLogger
from core.notifications import MagicLinkDispatcher
from core.services.access_service import AccessService
from core.services.company_tag_service import CompanyTagService
from core.services.video_service import VideoService

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
    )


def install_fault_handlers(config: AuthConfig) -> None:
    """
    Route uncaught exceptions (main thread and worker threads) to the log.

    In production the process then exits with status 1 so the supervisor
    restarts it; in development it keeps running.
    """

    def handle(exc_type, exc_value, exc_tb) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)
            return
        logger.critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_tb))
        if config.is_production:
            logging.shutdown()
            os._exit(1)

    def handle_thread(args: threading.ExceptHookArgs) -> None:
        handle(args.exc_type, args.exc_value, args.exc_traceback)

    sys.excepthook = handle
    threading.excepthook = handle_thread


def build_services(
    config: AuthConfig,
    postgres: PostgresClient,
    valkey: ValkeyClient,
    email_client: ResendEmailClient | LogOnlyEmailClient,
) -> dict:
    """Wire every service from its clients."""
    audit = AuditLogger(postgres)
    security_logger = SecurityLogger(postgres)
    auth_db = AdminUserDatabase(postgres)

    company_tag = CompanyTagService(postgres, audit)
    video = VideoService(postgres, audit, company_tag)
    access = AccessService(
        postgres,
        videos=video,
        dispatcher=MagicLinkDispatcher(email_client, config),
        rate_limiter=RateLimiter(valkey, config),
        security_logger=security_logger,
    )

    return {
        "company_tag": company_tag,
        "video": video,
        "access": access,
        "admin_user": AdminUserService(config, auth_db, company_tag, audit),
        "auth": AdminAuthService(
            config,
            auth_db,
            SessionManager(valkey, config),
            security_logger,
        ),
    }


def build_app(
    config: AuthConfig,
    postgres: PostgresClient,
    valkey: ValkeyClient,
    services: dict,
) -> FastAPI:
    """Assemble routes, middleware and error handlers around ready services."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        valkey.close()
        PostgresClient.close_all_pools()

    app = FastAPI(title=config.app_name, lifespan=lifespan)

    register_error_handlers(app)

    # Added first so it runs inside RequestIDMiddleware
    app.add_middleware(AuthMiddleware, auth_service=services["auth"])
    app.add_middleware(RequestIDMiddleware)

    app.include_router(create_health_router(postgres, valkey))
    app.include_router(create_access_router(services), prefix="/api")
    app.include_router(create_admin_auth_router(services["auth"], config), prefix="/api/admin")
    app.include_router(create_admin_router(services), prefix="/api/admin")

    return app


def create_app(config: AuthConfig | None = None) -> FastAPI:
    """Production entry point: secrets from Vault, settings from the environment."""
    config = config or AuthConfig.from_env()
    configure_logging()
    install_fault_handlers(config)

    postgres = PostgresClient(get_database_url())
    valkey = ValkeyClient(get_valkey_url())
    email_config = get_email_config()
    email_client = create_email_client(
        email_config["api_key"],
        email_config["from_address"] or config.email_from,
    )

    services = build_services(config, postgres, valkey, email_client)
    logger.info(f"{config.app_name} starting in {config.environment.value} mode")
    return build_app(config, postgres, valkey, services)

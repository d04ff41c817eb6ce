"""GET /health - store reachability."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.base import ErrorCodes, error_response, get_request_id, success_response
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient

logger = logging.getLogger(__name__)


def _check(name: str, probe) -> bool:
    try:
        return bool(probe())
    except Exception as e:
        logger.warning(f"Health check for {name} failed: {e}")
        return False


def create_health_router(postgres: PostgresClient, valkey: ValkeyClient) -> APIRouter:
    router = APIRouter(tags=["health"])

    @router.get("/health")
    async def health(request: Request):
        checks = {
            "postgres": _check("postgres", postgres.ping),
            "valkey": _check("valkey", valkey.ping),
        }
        if all(checks.values()):
            return success_response(
                {"status": "healthy", "checks": checks},
                request_id=get_request_id(request),
            ).model_dump(mode="json")

        failing = ", ".join(name for name, ok in checks.items() if not ok)
        response = error_response(
            ErrorCodes.SERVICE_UNAVAILABLE,
            f"Unavailable: {failing}",
            request_id=get_request_id(request),
        )
        response.data = {"status": "unhealthy", "checks": checks}
        return JSONResponse(status_code=503, content=response.model_dump(mode="json"))

    return router

"""API modules for HTTP interface."""

from api.base import (
    APIError,
    APIMeta,
    APIResponse,
    success_response,
    error_response,
    get_client_ip,
    get_request_id,
    ErrorCodes,
)

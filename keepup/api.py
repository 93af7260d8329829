"""HTTP API for package inventory submission and retrieval.

Routes:
    PUT  /package-version   submit a host inventory, returns {"id": ...}
    GET  /package-version   fetch a stored record by ?id=<uuid>
    GET  /healthcheck       liveness check
    GET  /metrics           Prometheus exposition

Inventory routes require the ``x-api-token`` header.
"""

import hmac
import uuid
from typing import Dict, Optional

from fastapi import Depends, FastAPI, Header, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest
from pydantic import BaseModel, Field

from keepup.logging_config import logger

from . import __version__
from .exceptions import AuthenticationError, MarshalError, RecordNotFoundError, StoreReadError, StoreWriteError
from .metrics import PackageVersionsCollector
from .packages import PackageVersions, build_response


class PackageDocument(BaseModel):
    """Inbound inventory: package name -> raw version, plus data_center and host_ip."""

    packages: Dict[str, str] = Field(default_factory=dict)


class IDDocument(BaseModel):
    id: uuid.UUID


def create_app(
    repository: PackageVersions,
    api_token: str,
    registry: Optional[CollectorRegistry] = None,
) -> FastAPI:
    """
    Build the keepup FastAPI application.

    Args:
        repository: Package record repository used by the inventory routes
        api_token: Token expected in the x-api-token header
        registry: Prometheus registry for /metrics; a private one is created if omitted

    Returns:
        Configured FastAPI application
    """
    if registry is None:
        registry = CollectorRegistry()
    registry.register(PackageVersionsCollector(repository))

    app = FastAPI(title="keepup", version=__version__)
    app.state.repository = repository
    app.state.registry = registry

    def require_token(x_api_token: Optional[str] = Header(None)) -> None:
        if x_api_token is None or not hmac.compare_digest(x_api_token.encode("utf-8"), api_token.encode("utf-8")):
            raise AuthenticationError("Invalid API token")

    @app.exception_handler(AuthenticationError)
    async def forbidden_handler(request: Request, exc: AuthenticationError) -> PlainTextResponse:
        return PlainTextResponse("FORBIDDEN", status_code=403)

    @app.exception_handler(RequestValidationError)
    async def bad_request_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse({"detail": "Invalid request payload"}, status_code=400)

    @app.put("/package-version", response_model=IDDocument, dependencies=[Depends(require_token)])
    def insert_packages(document: PackageDocument):
        try:
            record_id = repository.insert(document.packages)
        except (MarshalError, StoreWriteError) as e:
            logger.error(f"Failed to insert packages: {e}")
            return JSONResponse({"detail": "Failed to insert package data"}, status_code=500)
        return IDDocument(id=record_id)

    @app.get("/package-version", dependencies=[Depends(require_token)])
    def get_packages(id: uuid.UUID = Query(...)):
        try:
            record = repository.retrieve(id)
        except RecordNotFoundError:
            return JSONResponse({"detail": "Packages data not found"}, status_code=404)
        except (MarshalError, StoreReadError) as e:
            logger.error(f"Failed to retrieve packages {id}: {e}")
            return JSONResponse({"detail": "Failed to retrieve packages data"}, status_code=500)
        return build_response(record)

    @app.get("/healthcheck", response_class=PlainTextResponse)
    def healthcheck() -> str:
        return "OK"

    @app.get("/metrics")
    def metrics() -> Response:
        return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

    return app

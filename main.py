"""
Main API module for TinyLink.

Responsibilities:
    - Expose REST endpoints to create, list, fetch and delete short links
    - Redirect visitors from /{code} to the target URL, counting the click
    - Health check for load balancers

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - The link store is built once per app (injected, or from config at
      startup) and closed at shutdown by the lifespan handler.
    - LinkManager owns validation and error mapping; routes stay thin.
    - Registry errors become HTTP statuses in one exception handler.

LLM Prompt Example:
    "Explain how to structure a FastAPI service with an application factory,
    injected dependencies, and a clean separation between API and business logic."
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import Body, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel

from tinylink.config import settings
from tinylink.errors import AlreadyExists, InvalidInput, LinkError, NotFound, StorageUnavailable
from tinylink.manager.link_manager import LinkManager
from tinylink.storage.base import BaseStorage
from tinylink.storage.storage_factory import get_storage

log = logging.getLogger("tinylink")

_STATUS_BY_ERROR = {
    InvalidInput: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
    AlreadyExists: status.HTTP_409_CONFLICT,
    StorageUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


class LinkRequest(BaseModel):
    """Request payload for creating a link. Both fields are checked by the manager."""
    code: Any = None
    url: Any = None

    @classmethod
    def from_body(cls, body: Any) -> "LinkRequest":
        # Bodiless or non-object payloads carry no fields
        return cls.model_validate(body) if isinstance(body, dict) else cls()


def create_app(store: Optional[BaseStorage] = None) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        store (BaseStorage, optional): Link store to serve. When omitted, one is
            built from configuration at startup. Either way the app closes it
            at shutdown.

    Returns:
        FastAPI: A fully configured application instance.

    Why an app factory?
        - Enables per-test isolation in pytest (inject a fresh in-memory store).
        - Avoids a process-wide database handle shared through module globals.
    """
    if not logging.getLogger().handlers:
        logging.basicConfig(level=settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "store", None) is None:
            _bind(app, get_storage())
        log.info("TinyLink started with %s", type(app.state.store).__name__)
        try:
            yield
        finally:
            app.state.store.close()
            log.info("TinyLink link store closed")

    app = FastAPI(
        title="TinyLink",
        description="URL shortener with click counting",
        version=settings.VERSION,
        lifespan=lifespan,
    )
    if store is not None:
        _bind(app, store)

    def _manager(request: Request) -> LinkManager:
        return request.app.state.manager

    # ----------------------------------------------------------------
    # Error mapping
    # ----------------------------------------------------------------
    @app.exception_handler(LinkError)
    async def link_error_handler(request: Request, exc: LinkError) -> JSONResponse:
        code = next(
            (s for cls, s in _STATUS_BY_ERROR.items() if isinstance(exc, cls)),
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
        if not exc.client_error:
            log.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse({"error": str(exc)}, status_code=code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Unparseable create payloads (bad JSON) are invalid input like missing fields
        return await link_error_handler(request, InvalidInput("Missing fields: code, url"))

    # ----------------------------------------------------------------
    # Routes
    # ----------------------------------------------------------------
    @app.get("/healthz")
    def healthz() -> Dict[str, Any]:
        return {"ok": True, "version": settings.VERSION}

    @app.post("/api/links", status_code=status.HTTP_201_CREATED)
    def create_link(request: Request, body: Any = Body(default=None)) -> Dict[str, Any]:
        """
        Create a short link.

        Raises (mapped by the exception handler):
            InvalidInput -> 400, AlreadyExists -> 409, StorageUnavailable -> 503
        """
        req = LinkRequest.from_body(body)
        record = _manager(request).create_link(req.code, req.url)
        return {"ok": True, "link": record.to_dict()}

    @app.get("/api/links")
    def list_links(request: Request) -> List[Dict[str, Any]]:
        return [r.to_dict() for r in _manager(request).list_links()]

    @app.get("/api/links/{code}")
    def get_link(code: str, request: Request) -> Dict[str, Any]:
        return _manager(request).get_link(code).to_dict()

    @app.delete("/api/links/{code}")
    def delete_link(code: str, request: Request) -> Dict[str, Any]:
        _manager(request).delete_link(code)
        return {"ok": True}

    # Must stay last so it doesn't shadow the routes above
    @app.get("/{code}", name="redirect_link")
    def redirect_link(code: str, request: Request) -> RedirectResponse:
        """
        Resolve `code`, count the click, and redirect (302) to the target.
        Unknown codes are 404 and count nothing.
        """
        target = _manager(request).resolve(code)
        return RedirectResponse(url=target, status_code=status.HTTP_302_FOUND)

    return app


def _bind(app: FastAPI, store: BaseStorage) -> None:
    app.state.store = store
    app.state.manager = LinkManager(storage=store)


# `uvicorn main:app` and `from main import app` keep working.
# The store is built from config when the server starts, not at import.
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)

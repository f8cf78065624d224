"""FastAPI application serving vanity import metadata."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse

from vanityurls.server.config import VanityConfig  # noqa: TC001 - used at runtime
from vanityurls.server.dispatch import MetadataPage, NotFound, Redirect, dispatch
from vanityurls.server.html import generate_index_page, generate_vanity_page
from vanityurls.server.table import build_mount_table

logger = logging.getLogger(__name__)

HTTP_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(config: VanityConfig) -> FastAPI:
    """Create a FastAPI application with the given configuration.

    The mount table is validated here, so a bad configuration fails before
    anything is served.

    Args:
        config: Vanity server configuration

    Returns:
        Configured FastAPI application

    Raises:
        ConfigError: if the configuration is invalid
    """
    table = build_mount_table(config)

    app = FastAPI(
        title="vanityurls",
        description="Vanity import paths for go get and other VCS-aware tools",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.mount_table = table

    @app.api_route("/{full_path:path}", methods=HTTP_METHODS)
    async def serve(request: Request, full_path: str) -> Response:
        """Answer a request for any path."""
        # full_path is the decoded path; "%23" and "%3F" stay part of it
        path = "/" + full_path
        decision = dispatch(table, path, request.headers.get("host", ""))

        if isinstance(decision, NotFound):
            raise HTTPException(status_code=404, detail="Not Found")

        if isinstance(decision, Redirect):
            return RedirectResponse(url=decision.location, status_code=decision.status_code)

        try:
            if isinstance(decision, MetadataPage):
                html = generate_vanity_page(decision)
                headers = {"Cache-Control": decision.cache_control}
            else:
                html = generate_index_page(decision)
                headers = {}
        except Exception:
            logger.exception("Cannot render the page for %s", path)
            return PlainTextResponse("cannot render the page", status_code=500)

        return HTMLResponse(content=html, headers=headers)

    return app

"""
FastAPI application serving the hymn data to clients.

Endpoints:
  GET  /api/hymns                 - Index entries (HymnInfo list)
  GET  /api/hymns/{id}            - Full hymn record
  GET  /api/hymns/{id}/lyrics     - Lyrics in singing order
  GET  /api/categories            - Category names
  GET  /api/categories/{name}     - Hymns in a category
  GET  /api/tags                  - Tag names
  GET  /api/tags/{name}           - Hymns with a tag
  GET  /api/search?q=             - Title/subtitle search
  GET  /api/bundle                - Offline bundle for the mobile app
"""

import os
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from .bundle import generate_bundle
from .config import Settings, configure_logging
from .exceptions import NotFoundError, ValidationError
from .library import HymnLibrary


def create_app(library: Optional[HymnLibrary] = None) -> FastAPI:
    """Build the app around ``library`` (defaults to the env-configured one)."""
    if library is None:
        library = HymnLibrary.from_settings(Settings.from_env())

    app = FastAPI(title="Nyimbo Zetu")
    app.state.library = library
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # ------------------------------------------------------------------
    # Error mapping
    # ------------------------------------------------------------------

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ValidationError)
    async def _invalid(request: Request, exc: ValidationError):
        logger.warning(f"{request.url.path}: {exc}")
        return JSONResponse(status_code=422, content={"detail": str(exc), "errors": exc.errors})

    # ------------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------------

    @app.get("/api/hymns")
    def list_hymns():
        return [info.model_dump(mode="json") for info in library.list_hymns()]

    @app.get("/api/hymns/{hymn_id}")
    def get_hymn(hymn_id: int):
        return library.load_hymn(hymn_id).to_dict()

    @app.get("/api/hymns/{hymn_id}/lyrics")
    def get_lyrics(hymn_id: int):
        hymn = library.load_hymn(hymn_id)
        return {"id": hymn.id, "title": hymn.title, "sections": hymn.lyrics()}

    @app.get("/api/categories")
    def categories():
        return library.get_categories()

    @app.get("/api/categories/{name}")
    def hymns_in_category(name: str):
        return [h.to_dict() for h in library.get_hymns_by_category(name)]

    @app.get("/api/tags")
    def tags():
        return library.get_tags()

    @app.get("/api/tags/{name}")
    def hymns_with_tag(name: str):
        return [h.to_dict() for h in library.get_hymns_by_tag(name)]

    @app.get("/api/search")
    def search(q: str = ""):
        return [h.to_dict() for h in library.search_hymns_by_title(q)]

    @app.get("/api/bundle")
    def bundle():
        return generate_bundle(library).to_dict()

    return app


app = create_app()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main():
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    port = int(os.environ.get("NYIMBO_PORT", "8888"))
    logger.info(f"Starting Nyimbo Zetu API on port {port} (data: {settings.data_dir})")
    uvicorn.run(
        "nyimbo_zetu.app:app",
        host="0.0.0.0",
        port=port,
        reload=False,
    )


if __name__ == "__main__":
    main()

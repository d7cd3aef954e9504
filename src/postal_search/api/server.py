"""
FastAPI server for address search and index rebuilds.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from postal_search.api.loader import get_loader, init_loader
from postal_search.api.models import IndexStats, RebuildResponse, SearchResponse
from postal_search.api.query import QueryService
from postal_search.config import Config, load_config
from postal_search.ingestion.source import DownloadError
from postal_search.pipeline import index_stats, rebuild_index

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for the FastAPI app.

    Loads the current index version on startup if one has been published.
    """
    config = getattr(app.state, "config", None) or load_config()
    app.state.config = config
    logging.getLogger().setLevel(config.log_level)

    logger.info("Starting up: loading indexes...")
    try:
        init_loader(config.storage.base_path)
        logger.info("Indexes loaded successfully")
    except FileNotFoundError as e:
        logger.warning(f"No index available yet, POST /v1/index to build one: {e}")

    yield

    logger.info("Shutting down...")


app = FastAPI(
    title="Postal Search API",
    description="Keyword search over the Japan Post address catalogue",
    version="0.1.0",
    lifespan=lifespan,
)


def get_app_config(request: Request) -> Config:
    """Configuration attached to the running app."""
    config = getattr(request.app.state, "config", None)
    if config is None:
        config = load_config()
        request.app.state.config = config
    return config


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "Postal Search API is running"}


@app.get("/v1/search", response_model=SearchResponse)
async def search(
    keyword: str = Query("", description="Search keyword; whitespace is ignored"),
) -> SearchResponse:
    """
    Search addresses containing every character of the keyword.

    Raises:
        503: If no index has been loaded
    """
    try:
        service = QueryService(get_loader())
        return service.search(keyword)
    except RuntimeError as e:
        logger.warning(f"Search unavailable: {e}")
        raise HTTPException(status_code=503, detail="Index not available")
    except Exception as e:
        logger.error(f"Error in search: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@app.post("/v1/index", response_model=RebuildResponse)
def create_index(
    download: bool = Query(True, description="Download a fresh source archive first"),
    config: Config = Depends(get_app_config),
) -> RebuildResponse:
    """
    Rebuild the index and switch the server to the new version.

    Raises:
        502: If the source archive cannot be downloaded
        500: If the source CSV is missing or the build fails
    """
    try:
        version = rebuild_index(config, download=download)
        loader = init_loader(config.storage.base_path)
    except DownloadError as e:
        logger.error(f"Rebuild failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except FileNotFoundError as e:
        logger.error(f"Rebuild failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.error(f"Error in create_index: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    current = loader.current_version
    return RebuildResponse(
        version=version,
        record_count=current.record_count,
        bigram_count=current.bigram_count,
    )


@app.get("/v1/index/stats", response_model=IndexStats)
def get_index_stats(config: Config = Depends(get_app_config)) -> IndexStats:
    """
    Statistics for the current index version.

    Raises:
        404: If no version has been published
    """
    try:
        return IndexStats(**index_stats(config))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.exception_handler(404)
async def not_found_handler(request, exc):
    """Custom 404 handler."""
    return JSONResponse(status_code=404, content={"detail": str(exc.detail)})


def main():
    """Run the server (for development)."""
    import uvicorn

    config = load_config()
    uvicorn.run(app, host=config.server.host, port=config.server.port, log_level="info")


if __name__ == "__main__":
    main()

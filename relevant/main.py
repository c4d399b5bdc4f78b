"""FastAPI application entry point.

Serves the bundled dashboard UI. Existing files under the static
directory are returned as-is; every other path gets ``index.html`` so the
client-side router can resolve it.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.responses import FileResponse

from relevant.core.config import get_config
from relevant.core.logging import get_logger, setup_logging

# Setup logging
setup_logging()
logger = get_logger(__name__)

INDEX_FILE = "index.html"


def resolve_static_file(root: Path, requested: str) -> Path | None:
    """Map a request path to a file inside root.

    Returns:
        The file, or None when it does not exist or lies outside root
    """
    root = root.resolve()
    candidate = (root / requested.lstrip("/")).resolve()
    if not candidate.is_relative_to(root):
        logger.warning("Rejected path outside static directory", path=requested)
        return None
    return candidate if candidate.is_file() else None


def create_app(static_dir: Path | str | None = None) -> FastAPI:
    """Build the static UI server.

    Args:
        static_dir: Directory holding the built UI (defaults to config.static_dir)

    Returns:
        Configured FastAPI application
    """
    config = get_config()
    root = Path(static_dir) if static_dir is not None else config.static_dir

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Starting static UI server", env=config.app_env, static_dir=str(root))
        if not (root / INDEX_FILE).is_file():
            logger.warning("UI bundle not found", static_dir=str(root))
        yield
        logger.info("Shutting down static UI server")

    app = FastAPI(
        title=config.app_name,
        description="Relevant dashboard UI",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )

    # Health check endpoint
    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint.

        Returns:
            Health status
        """
        return {
            "status": "healthy",
            "app": config.app_name,
            "env": config.app_env,
        }

    @app.get("/{full_path:path}", response_model=None)
    async def serve_spa(full_path: str) -> FileResponse:
        file_path = resolve_static_file(root, full_path)
        if file_path is not None:
            return FileResponse(file_path)

        index = root / INDEX_FILE
        if not index.is_file():
            raise HTTPException(status_code=404, detail="UI bundle not built")
        return FileResponse(index)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _config = get_config()
    uvicorn.run(
        "relevant.main:app",
        host=_config.host,
        port=_config.port,
        log_level=_config.log_level.lower(),
    )

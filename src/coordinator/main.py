from __future__ import annotations

import argparse
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .config import CoordinatorSettings, settings
from .logging import configure_logging
from .routes import pages_router, status_router, ws_router
from .service import CoordinationService

logger = logging.getLogger(__name__)


def create_app(cfg: CoordinatorSettings | None = None) -> FastAPI:
    """
    Create the coordination service app with a fresh CoordinationService.
    """
    cfg = cfg or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Coordination service started (arrangement=%s)", app.state.service.arrangement)
        logger.info("Setup page available at http://localhost:%s/setup", cfg.port)
        yield
        logger.info("Shutting down coordination service")

    app = FastAPI(
        title="Display Coordination Service",
        description="Routes face-at-edge events between adjacent displays",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.service = CoordinationService(arrangement=cfg.default_arrangement)

    # CORS middleware for display pages served from other hosts
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origin_list,
        allow_methods=["GET", "POST", "PUT"],
        allow_headers=["*"],
    )

    app.include_router(pages_router)
    app.include_router(status_router)
    app.include_router(ws_router)
    app.mount("/static", StaticFiles(directory=cfg.static_dir, check_dir=False), name="static")

    @app.get("/health", tags=["health"])
    def health_check():
        """Health check endpoint."""
        return {"status": "ok", "service": "Display Coordination Service"}

    return app


app = create_app()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Display Coordination Service")
    parser.add_argument("--print-config", action="store_true", help="Print resolved configuration and exit.")
    parser.add_argument("--serve", action="store_true", help="Start the coordination service (HTTP + WebSocket).")
    return parser


def run(argv: list[str] | None = None, cfg: CoordinatorSettings | None = None) -> int:
    """
    Coordination service entrypoint.
    """
    cfg = cfg or CoordinatorSettings()
    try:
        args = build_parser().parse_args(argv)

        configure_logging(cfg.log_level)
        logger.info("Resolved config: host=%s port=%s arrangement=%s", cfg.host, cfg.port, cfg.default_arrangement)

        if args.print_config:
            print(cfg.model_dump())
            return 0

        if args.serve:
            import uvicorn

            logger.info("Server running on http://%s:%s", cfg.host, cfg.port)
            uvicorn.run(
                create_app(cfg),
                host=cfg.host,
                port=cfg.port,
                log_level=cfg.log_level.lower(),
            )
            return 0

        logger.info("Nothing to do. Use --print-config or --serve.")
        return 0

    except Exception:
        logger.exception("Coordination service crashed due to an unexpected error")
        if cfg.debug or cfg.log_level.upper() == "DEBUG":
            raise
        return 1


if __name__ == "__main__":
    raise SystemExit(run())

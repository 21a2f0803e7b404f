from __future__ import annotations

from typing import Any

import uvicorn
from fastapi import FastAPI
from loguru import logger

from clawdis import __version__
from clawdis.config.settings import load_config
from clawdis.gateway.routes import skills as skills_routes
from clawdis.gateway.routes import webhooks as webhook_routes
from clawdis.utils.logging import setup_logging

setup_logging()


def create_app(config: dict[str, Any] | None = None) -> FastAPI:
    app = FastAPI(title="Clawdis Gateway", version=__version__)
    app.state.config = config if config is not None else load_config()
    app.state.nextcloud_talk_handler = None
    app.include_router(skills_routes.router)
    app.include_router(webhook_routes.router)

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {"ok": True, "version": __version__}

    return app


def run_gateway(host: str | None = None, port: int | None = None, config: dict[str, Any] | None = None) -> None:
    cfg = config if config is not None else load_config()
    gateway = cfg.get("gateway") if isinstance(cfg.get("gateway"), dict) else {}
    bind_host = host or str(gateway.get("host") or "127.0.0.1")
    bind_port = int(port or gateway.get("port") or 18789)
    logger.info("gateway starting host={} port={}", bind_host, bind_port)
    uvicorn.run(create_app(cfg), host=bind_host, port=bind_port, log_level="info")

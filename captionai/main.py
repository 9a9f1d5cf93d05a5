"""
Purpose:
- FastAPI application factory and router mounts.
- Lifespan builds the shared HTTP clients, caption gateway and (optional) Supabase collaborators.
- Adds CORS for the browser front end.
- Uvicorn will serve this on 0.0.0.0:8000 by default.
"""

from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.settings import Settings, gateway_config_from_settings, settings as default_settings
from .gateway.client import GeminiCaptionGateway
from .store.auth import SupabaseAuthClient
from .store.base import supabase_config_from_settings
from .store.records import SupabaseRecordStore
from .api.health import router as health_router
from .api.captions import router as captions_router
from .api.auth import router as auth_router

logger = logging.getLogger(__name__)


def create_app(cfg: Optional[Settings] = None) -> FastAPI:
    cfg = cfg or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        gw_cfg = gateway_config_from_settings(cfg)
        gemini_http = httpx.AsyncClient(timeout=gw_cfg.timeout_s)
        app.state.gateway = GeminiCaptionGateway(gw_cfg, client=gemini_http)
        if not gw_cfg.api_key:
            logger.warning("GEMINI_API_KEY not set; caption requests will fail until it is configured.")

        supa_http: Optional[httpx.AsyncClient] = None
        sb_cfg = supabase_config_from_settings(cfg)
        if sb_cfg is not None:
            supa_http = httpx.AsyncClient(timeout=sb_cfg.timeout_s)
            app.state.record_store = SupabaseRecordStore(sb_cfg, supa_http)
            app.state.auth_client = SupabaseAuthClient(sb_cfg, supa_http)
            logger.info("Supabase history enabled (table=%s).", sb_cfg.captions_table)
        else:
            app.state.record_store = None
            app.state.auth_client = None
            logger.info("Supabase not configured; running without accounts or history.")

        try:
            yield
        finally:
            await gemini_http.aclose()
            if supa_http is not None:
                await supa_http.aclose()

    app = FastAPI(title="CaptionAI API", version="0.1.0", lifespan=lifespan)
    app.state.settings = cfg
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(health_router)
    app.include_router(captions_router)
    app.include_router(auth_router)
    return app


def main() -> None:
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host=default_settings.host, port=default_settings.port)


app = create_app()

if __name__ == "__main__":
    main()

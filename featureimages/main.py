from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from featureimages.config import get_settings
from featureimages.handlers import pages
from featureimages.services.storage import LocalAssetStorage, get_asset_storage
from featureimages.services.storage.local import ASSETS_URL_PREFIX


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Feature Images API")
    app.include_router(pages.router)

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    if settings.storage_backend == "local":
        storage = get_asset_storage()
        if isinstance(storage, LocalAssetStorage):
            app.mount(ASSETS_URL_PREFIX, StaticFiles(directory=storage.root), name="assets")

    return app


app = create_app()

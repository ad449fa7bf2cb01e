"""FastAPI entry point (middlewares, exception handlers, routers, static uploads)."""
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from pymongo.errors import PyMongoError
from voicenotes.core.config import settings
from voicenotes.infrastructure.db.mongo import init_mongo, db_ready, close_mongo
from voicenotes.infrastructure.db.bootstrap import ensure_collections
from voicenotes.infrastructure.storage.uploads import PUBLIC_PREFIX, uploads_dir
from voicenotes.api.router import api_router
from voicenotes.core.logging import setup_logging
from voicenotes.core.middleware import add_middlewares
from voicenotes.core.exceptions import register_exception_handlers
import logging

_log = logging.getLogger("voicenotes.startup")

setup_logging(settings.log_level)
app = FastAPI(title=settings.app_name)

add_middlewares(app)
register_exception_handlers(app)


@app.on_event("startup")
def on_startup():
    if not db_ready():
        init_mongo()
    # Collections/indexes/validators when the server is reachable
    try:
        if db_ready():
            ensure_collections()
        else:
            _log.warning("MongoDB not ready; skipping ensure_collections()")
    except PyMongoError as e:
        _log.warning("ensure_collections() failed: %s", e)


@app.on_event("shutdown")
def on_shutdown():
    close_mongo()


app.include_router(api_router, prefix=settings.api_prefix_normalized)

# Legacy: artifacts are removed after transcription, so this is normally empty
app.mount(PUBLIC_PREFIX, StaticFiles(directory=str(uploads_dir())), name="uploads")


def run() -> None:
    """Console entry point: `voicenotes-server`."""
    import uvicorn

    uvicorn.run("voicenotes.main:app", host="0.0.0.0", port=settings.port)

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from todolist.app.config import get_settings
from todolist.app.core.features import get_features
from todolist.app.core.logging_config import configure_logging
from todolist.app.db import StoreMonitor, engine
from todolist.app.routers import health as health_router
from todolist.app.routers import todos as todos_router

settings = get_settings()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Todo List API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url=None,
)

if settings.is_production:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
else:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.state.engine = engine
app.state.store_monitor = StoreMonitor(engine, settings.store_probe_interval_sec)


@app.on_event("startup")
def on_startup() -> None:
    configure_logging(settings.log_level)
    # The first reachable probe creates the table (safe no-op if it already exists)
    status = app.state.store_monitor.refresh()
    logger.info(
        "todo api starting env=%s port=%s database=%s store=%s",
        settings.app_env,
        settings.port,
        "configured" if settings.database_url else "not configured",
        "connected" if status.connected else "disconnected",
    )


app.include_router(todos_router.router)
app.include_router(health_router.router)
if get_features(settings)["init_db_route"]:
    app.include_router(health_router.init_db_router)


def run() -> None:
    import uvicorn

    configure_logging(settings.log_level)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()

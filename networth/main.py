from contextlib import asynccontextmanager
from fastapi import FastAPI
from .logging import setup_logging
from .api.routes import router as api_router
from .config import settings
from .db import get_conn, migrate
from .providers.chain import ProviderChain

def create_app(price_provider=None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        conn = get_conn(settings.db_path)
        try:
            migrate(conn)
        finally:
            conn.close()
        yield
        closer = getattr(app.state.price_provider, "close", None)
        if callable(closer):
            closer()

    app = FastAPI(title="networth-service", lifespan=lifespan)
    app.state.price_provider = price_provider if price_provider is not None else ProviderChain()
    app.include_router(api_router)
    return app

setup_logging()
app = create_app()

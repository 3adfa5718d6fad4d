import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from supabase import Client, create_client

from config import Settings
from repository import EntryRepository
import routes

logger = logging.getLogger("JournalAPI")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Logic to run when server starts
    logger.info(f"Server is starting up ({app.state.settings.environment})...")
    yield
    # Shutdown: Logic to run when server stops
    logger.info("Server is shutting down...")


def create_app(settings: Optional[Settings] = None, client: Optional[Client] = None) -> FastAPI:
    """
    Build the API around an explicit configuration and Supabase client.

    Tests pass both in; `uvicorn --factory main:create_app` reads them from the environment.
    """
    # 1. Setup Environment and Logging
    settings = settings or Settings.from_env()
    logging.basicConfig(level=settings.log_level)

    # 2. Initialize the store client
    client = client or create_client(settings.supabase_url, settings.supabase_key)

    app = FastAPI(title="Journal API", lifespan=lifespan)
    app.state.settings = settings
    app.state.supabase = client
    app.state.repository = EntryRepository(client, settings.entries_table)

    # 3. CORS Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception for request {request.url.path}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"message": "An internal server error occurred."},
        )

    # 4. API Endpoints
    app.include_router(routes.router, prefix="/entries", tags=["entries"])

    @app.get("/api/health")
    def health_check():
        return {"status": "ok", "message": "Server is running"}

    @app.get("/")
    def read_root():
        return {"status": "Journal API is Online"}

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:create_app", factory=True, host="0.0.0.0", port=Settings.from_env().port)

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.database import create_tables, dispose_engine
from app.core.exceptions import StorageError, StorageObjectNotFoundError
from app.routers import (
    auth_router, user_router,
    contract_router, contract_file_router, signature_router
)

# --- register every model with SQLAlchemy at startup ---
from app.models import user
from app.models import contract
from app.models import signature


logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    logger.info("Database tables ready")
    yield
    await dispose_engine()
    logger.info("Application stopped")


app = FastAPI(
    title="Contract Signing API",
    description="Upload contracts, invite counterparties and collect signatures",
    version="0.1.0",
    lifespan=lifespan,
)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- object storage failures ---
@app.exception_handler(StorageObjectNotFoundError)
async def storage_object_not_found_handler(request: Request, exc: StorageObjectNotFoundError):
    logger.error(f"Stored file missing for {request.url.path}: key={exc.key}")
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": "File not found"})

@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Storage error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )

# --- root ---
@app.get("/")
def read_root():
    return {"status": "success", "message": "Backend is running!"}

# --- API routes ---
app.include_router(auth_router.router)
app.include_router(user_router.router)
app.include_router(contract_router.router)
app.include_router(contract_file_router.router)
app.include_router(signature_router.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)

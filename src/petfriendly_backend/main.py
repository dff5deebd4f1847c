from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .configuration import allowed_origins, get_settings
from .dependencies import get_storage, get_user_service, load_user_by_email
from .errors import PetFriendlyError
from .middleware import SecurityMiddleware
from .routers import actuator_router, api_router
from .seed import seed_demo_accounts
from .storage import UPLOADS_URL_PREFIX, StorageError

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=str(settings.logging.level).upper())
    if settings.seed.demo_accounts:
        seed_demo_accounts(get_user_service())
    logger.info(f"{settings.app.name} {settings.app.version} started")
    yield


app = FastAPI(
    title=settings.app.name,
    version=settings.app.version,
    description=settings.app.description,
    docs_url="/swagger-ui",
    openapi_url="/v3/api-docs",
    redoc_url=None,
    lifespan=lifespan,
)

# Added first so CORS wraps it and answers preflight requests itself.
app.add_middleware(SecurityMiddleware, user_loader=load_user_by_email)
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins(settings),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount(UPLOADS_URL_PREFIX, StaticFiles(directory=get_storage().upload_dir), name="uploads")

app.include_router(api_router, prefix="/api/v1")
app.include_router(actuator_router, prefix="/actuator", tags=["actuator"])


@app.exception_handler(PetFriendlyError)
async def domain_error_handler(request: Request, exc: PetFriendlyError) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    return JSONResponse(status_code=502, content={"detail": str(exc)})

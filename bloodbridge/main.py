from __future__ import annotations

from typing import Dict

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .routers import auth, directory, donation_requests, donors, regions, users
from .services.api_client import ApiError
from .services.donation_requests import AccountBlockedError
from .utils.logging import configure_logging, log_api_error

configure_logging(settings.log_level)

app = FastAPI(title="BloodBridge API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(donation_requests.router)
app.include_router(donors.router)
app.include_router(regions.router)
app.include_router(directory.router)
app.include_router(users.router)


@app.exception_handler(AccountBlockedError)
async def account_blocked(_: Request, exc: AccountBlockedError) -> JSONResponse:
    return JSONResponse({"detail": exc.message}, status_code=status.HTTP_403_FORBIDDEN)


@app.exception_handler(ApiError)
async def upstream_failure(request: Request, exc: ApiError) -> JSONResponse:
    log_api_error(request.url.path, exc)
    code = exc.status_code if exc.status_code < 500 else status.HTTP_502_BAD_GATEWAY
    return JSONResponse({"detail": exc.message}, status_code=code)


@app.get("/health")
async def healthcheck() -> Dict[str, str]:
    return {"status": "ok"}

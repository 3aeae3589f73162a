from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from artgallery.config import get_settings
from artgallery.handlers import auth, blogs, categories, contact, media, orders, paintings

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Kashish Art India API")

allowed_origins = [
    "http://localhost:3000",
    "http://localhost:5173",
    "https://kashishartindia.com",
    "https://www.kashishartindia.com",
]
if settings.frontend_url:
    allowed_origins.append(settings.frontend_url.rstrip("/"))

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

settings.uploads_dir.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.uploads_dir), name="uploads")

app.include_router(auth.router)
app.include_router(paintings.router)
app.include_router(categories.router)
app.include_router(blogs.router)
app.include_router(orders.router)
app.include_router(media.router)
app.include_router(contact.router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Bad client input is reported as 400 across the API.
    messages = [
        f"{'.'.join(str(p) for p in err['loc'] if p != 'body')}: {err['msg']}" for err in exc.errors()
    ]
    logger.info("Rejected %s %s: %s", request.method, request.url.path, messages)
    return JSONResponse(status_code=400, content={"detail": "; ".join(messages)})


@app.get("/api/health")
async def health():
    return {
        "status": "OK",
        "message": "Server is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from artgallery.config import Settings, get_settings
from artgallery.services.auth import ADMIN_ROLE, create_token, require_admin, verify_credentials

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)


class LoginRequest(BaseModel):
    email: str
    password: str


@router.post("/login")
async def login(body: LoginRequest, settings: Settings = Depends(get_settings)):
    if not verify_credentials(body.email, body.password, settings):
        logger.warning("Failed admin login for %s", body.email)
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token = create_token(settings.admin_email, settings)
    logger.info("Admin %s logged in", settings.admin_email)
    return {
        "success": True,
        "token": token,
        "user": {"email": settings.admin_email, "role": ADMIN_ROLE},
    }


@router.get("/me")
async def me(claims: dict = Depends(require_admin)):
    return {"success": True, "user": {"email": claims.get("sub"), "role": claims.get("role")}}

"""Public contact form relay."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from artgallery.services.email import EmailService, get_email_service

router = APIRouter(prefix="/api/email", tags=["contact"])
logger = logging.getLogger(__name__)


class ContactMessage(BaseModel):
    name: str = ""
    email: str = ""
    subject: str = ""
    message: str = ""


@router.post("/contact")
async def send_contact_email(
    body: ContactMessage,
    mailer: EmailService = Depends(get_email_service),
):
    if not all(v.strip() for v in (body.name, body.email, body.subject, body.message)):
        raise HTTPException(status_code=400, detail="Please provide all required fields")

    logger.info("Contact form submission from %s: %s", body.email, body.subject)
    admin_sent = mailer.send_contact_message(body.name, body.email, body.subject, body.message)
    if not admin_sent:
        raise HTTPException(status_code=500, detail="Failed to send message")

    acknowledged = mailer.send_contact_acknowledgement(body.name, body.email, body.subject)
    if not acknowledged:
        logger.warning("Acknowledgement email to %s was not sent", body.email)
    return {
        "success": True,
        "message": "Your message has been sent successfully",
        "admin_email_sent": admin_sent,
        "acknowledge_email_sent": acknowledged,
    }

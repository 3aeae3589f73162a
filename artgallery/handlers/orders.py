"""Purchase inquiries from the public site and their admin workflow."""
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from artgallery.handlers.forms import validation_detail
from artgallery.models import Order, OrderCreate, OrderStatusUpdate, OrderUpdate, Painting
from artgallery.services.auth import require_admin
from artgallery.services.document_store import DocumentStore
from artgallery.services.email import EmailService, get_email_service
from artgallery.services.firebase_db import get_db
from artgallery.services.images import ImageResolver, get_image_resolver

router = APIRouter(prefix="/api/orders", tags=["orders"])
logger = logging.getLogger(__name__)


def _painting_details(body: OrderCreate, painting: Painting, resolver: ImageResolver) -> dict[str, Any]:
    """Client-supplied details win; gaps are filled from the stored painting."""

    images = resolver.display_all(painting.images)
    stored = {
        "title": painting.title,
        "artist": painting.artist,
        "price": painting.price,
        "image": images[0] if images else "",
        "category": painting.category,
        "medium": painting.medium or "",
        "dimensions": painting.size or "",
    }
    if body.painting_details is None:
        return stored
    supplied = body.painting_details.model_dump()
    return {key: supplied.get(key) or value for key, value in stored.items()}


def _notify(action: str, send, *args) -> None:
    try:
        if not send(*args):
            logger.warning("%s email was not sent", action)
    except Exception:
        logger.exception("Failed to send %s email", action)


def _get_or_404(db: DocumentStore, order_id: str) -> Order:
    order = db.get(Order, order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.post("", status_code=201)
async def create_order(
    body: OrderCreate,
    db: DocumentStore = Depends(get_db),
    resolver: ImageResolver = Depends(get_image_resolver),
    mailer: EmailService = Depends(get_email_service),
):
    painting = db.get(Painting, body.painting_id)
    if painting is None:
        raise HTTPException(status_code=404, detail="Painting not found")
    if not painting.is_available:
        logger.info("Order created for painting %s which is marked as unavailable", painting.id)

    order = db.create(
        Order,
        {
            "customer": body.customer.model_dump(),
            "painting_id": painting.id,
            "painting_details": _painting_details(body, painting, resolver),
            "total_amount": body.total_amount if body.total_amount is not None else painting.price,
            "message": body.message,
            "status": "new",
        },
    )
    logger.info("Order %s created for painting %s", order.order_number, painting.id)

    _notify("order confirmation", mailer.send_order_confirmation, order)
    _notify("order notification", mailer.send_order_notification, order)
    return order.model_dump(mode="json")


@router.get("", dependencies=[Depends(require_admin)])
async def list_orders(db: DocumentStore = Depends(get_db)):
    orders = sorted(
        db.list(Order),
        key=lambda o: o.created_at.timestamp() if o.created_at else 0,
        reverse=True,
    )
    return {"orders": [o.model_dump(mode="json") for o in orders]}


@router.get("/{order_id}", dependencies=[Depends(require_admin)])
async def get_order(order_id: str, db: DocumentStore = Depends(get_db)):
    return _get_or_404(db, order_id).model_dump(mode="json")


@router.patch("/{order_id}/status", dependencies=[Depends(require_admin)])
async def update_order_status(
    order_id: str,
    body: OrderStatusUpdate,
    db: DocumentStore = Depends(get_db),
    mailer: EmailService = Depends(get_email_service),
):
    order = _get_or_404(db, order_id)
    previous = order.status
    updated = db.save(order.model_copy(update={"status": body.status}))
    logger.info("Order %s status %s -> %s", order_id, previous, updated.status)

    if previous != updated.status:
        _notify("order status", mailer.send_order_status_update, updated, previous)
    return updated.model_dump(mode="json")


@router.put("/{order_id}", dependencies=[Depends(require_admin)])
async def update_order(
    order_id: str,
    body: OrderUpdate,
    db: DocumentStore = Depends(get_db),
):
    order = _get_or_404(db, order_id)
    try:
        updated = db.save(order.model_copy(update=body.model_dump(exclude_unset=True)))
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=validation_detail(exc)) from exc
    return updated.model_dump(mode="json")


@router.delete("/{order_id}", dependencies=[Depends(require_admin)])
async def delete_order(order_id: str, db: DocumentStore = Depends(get_db)):
    _get_or_404(db, order_id)
    db.delete(Order, order_id)
    return {"message": "Order removed"}

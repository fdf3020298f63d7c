"""Public contact form for listed recipients."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from reviewguard.moderation.api.schemas import ContactAccepted, ContactIn
from reviewguard.moderation.domain.contact import ContactScreeningService
from reviewguard.moderation.domain.container import get_contact_service
from reviewguard.moderation.domain.notifier import ContactMessage

router = APIRouter(prefix="/api/recipients", tags=["contact"])


def get_contact_service_dep() -> ContactScreeningService:
    return get_contact_service()


@router.post("/{recipient_id}/contact", response_model=ContactAccepted, status_code=status.HTTP_202_ACCEPTED)
async def contact_recipient(
    recipient_id: str,
    payload: ContactIn,
    service: ContactScreeningService = Depends(get_contact_service_dep),
) -> ContactAccepted:
    await service.send(
        ContactMessage(
            recipient_id=recipient_id,
            subject=payload.subject,
            message=payload.message,
            sender_name=payload.sender_name,
            sender_email=payload.sender_email,
            sender_phone=payload.sender_phone,
        )
    )
    return ContactAccepted()

"""Renter document endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rento.api.deps import get_db
from rento.core.permissions import require_renter
from rento.models.user import RenterDocument, User
from rento.schemas.user import RenterDocumentCreate, RenterDocumentResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/documents",
    response_model=RenterDocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_document(
    document_data: RenterDocumentCreate,
    current_user: Annotated[User, Depends(require_renter)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RenterDocument:
    """Submit an identity document.

    A renter keeps one document per type; resubmitting replaces it and
    clears its verification.
    """
    result = await db.execute(
        select(RenterDocument).where(
            RenterDocument.user_id == current_user.id,
            RenterDocument.document_type == document_data.document_type,
        )
    )
    document = result.scalar_one_or_none()

    if document:
        document.document_number = document_data.document_number
        document.document_url = document_data.document_url
        document.verified = False
    else:
        document = RenterDocument(user_id=current_user.id, **document_data.model_dump())
        db.add(document)

    await db.flush()
    await db.refresh(document)

    logger.info(f"Renter {current_user.id} submitted {document.document_type}")
    return document


@router.get("/documents", response_model=list[RenterDocumentResponse])
async def list_documents(
    current_user: Annotated[User, Depends(require_renter)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[RenterDocument]:
    """List the current renter's documents."""
    result = await db.execute(
        select(RenterDocument)
        .where(RenterDocument.user_id == current_user.id)
        .order_by(RenterDocument.uploaded_at.desc())
    )
    return list(result.scalars().all())

# -*- coding: utf-8 -*-
"""
File Upload API Router
"""
import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from workorders.api.deps import get_app_settings, get_ticket_storage
from workorders.config import Settings
from workorders.models import TicketUpload
from workorders.services.ticket_storage import TicketStorage, sanitize_ticket_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/files", tags=["files"])


@router.post("/tickets/{ticket_id}/pdf", response_model=TicketUpload)
async def upload_ticket_pdf(
    ticket_id: str,
    file: UploadFile = File(...),
    settings: Settings = Depends(get_app_settings),
    storage: TicketStorage = Depends(get_ticket_storage),
):
    """
    Upload ticket PDF for an order.

    Returns download url and path relative to the uploads directory.
    """
    safe_id = sanitize_ticket_id(ticket_id)
    if not safe_id:
        raise HTTPException(status_code=400, detail="Некорректный идентификатор заказа")

    # Validate file type
    filename = file.filename or ""
    if file.content_type != "application/pdf" and not filename.lower().endswith(".pdf"):
        raise HTTPException(status_code=400, detail="Только PDF файлы разрешены")

    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Файл не загружен")

    # Limit size
    if len(content) > settings.MAX_UPLOAD_SIZE:
        limit_mb = settings.MAX_UPLOAD_SIZE // (1024 * 1024)
        raise HTTPException(status_code=413, detail=f"Файл слишком большой (макс. {limit_mb} МБ)")

    return storage.save(safe_id, content, filename)

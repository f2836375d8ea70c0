# -*- coding: utf-8 -*-
"""
Tickets API Router - stored ticket PDFs
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import FileResponse

from workorders.api.deps import get_ticket_storage
from workorders.models import StoredTicket
from workorders.services.ticket_storage import TicketStorage, sanitize_ticket_id

router = APIRouter(prefix="/tickets", tags=["tickets"])


@router.get("", response_model=List[StoredTicket])
async def list_tickets(storage: TicketStorage = Depends(get_ticket_storage)):
    """List stored PDFs, newest first"""
    return storage.list_tickets()


@router.get("/{ticket_id}/pdf")
async def get_ticket_pdf(
    ticket_id: str,
    filename: Optional[str] = Query(None, description="Stored file name"),
    download: bool = Query(False, description="Send as attachment"),
    storage: TicketStorage = Depends(get_ticket_storage),
):
    """Get ticket PDF"""
    if not sanitize_ticket_id(ticket_id):
        raise HTTPException(status_code=400, detail="Некорректный идентификатор")
    path = storage.get_path(ticket_id, filename)
    if not path:
        raise HTTPException(status_code=404, detail="PDF не найден")
    return FileResponse(
        path,
        media_type="application/pdf",
        filename=path.name,
        content_disposition_type="attachment" if download else "inline",
    )


@router.delete("/{ticket_id}")
async def delete_ticket_pdfs(ticket_id: str, storage: TicketStorage = Depends(get_ticket_storage)):
    """Delete every PDF stored for an order"""
    if not sanitize_ticket_id(ticket_id):
        raise HTTPException(status_code=400, detail="Некорректный идентификатор")
    return {"deleted": storage.delete_for(ticket_id)}

# -*- coding: utf-8 -*-
"""
Ticket Storage Service
Ticket PDFs on disk: uploads/tickets/<order id>/<file>.pdf, plus legacy
files uploads/ticket-<id>.pdf from before per-order directories
"""
import logging
import re
import shutil
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

from workorders.models import StoredTicket, TicketUpload

logger = logging.getLogger(__name__)

LEGACY_NAME_RE = re.compile(r"ticket-([A-Za-z0-9_-]+)\.pdf$", re.IGNORECASE)


def sanitize_ticket_id(value) -> str:
    """Keep only [A-Za-z0-9_-]"""
    return re.sub(r"[^A-Za-z0-9_-]", "", str(value or ""))


def default_filename(ticket_id: str) -> str:
    return f"ticket-{ticket_id}.pdf"


def ticket_url(ticket_id: str, filename: str) -> str:
    return f"/api/tickets/{quote(ticket_id)}/pdf?filename={quote(filename)}"


class TicketStorage:
    """Ticket PDF files under the uploads directory"""

    def __init__(self, upload_dir: Path):
        self.upload_dir = Path(upload_dir)
        self.root = self.upload_dir / "tickets"
        self.root.mkdir(parents=True, exist_ok=True)

    def _inside_uploads(self, path: Path) -> bool:
        try:
            path.resolve().relative_to(self.upload_dir.resolve())
            return True
        except ValueError:
            return False

    def save(self, ticket_id: str, content: bytes, filename: Optional[str] = None) -> TicketUpload:
        """
        Store a ticket PDF

        Args:
            ticket_id: Order id (sanitised)
            content: PDF bytes
            filename: Original name, kept if it is a .pdf

        Returns:
            TicketUpload with download url and path relative to uploads
        """
        safe_id = sanitize_ticket_id(ticket_id)
        if not safe_id:
            raise ValueError("Invalid ticket id")
        name = Path(filename).name if filename else ""
        if not name.lower().endswith(".pdf"):
            name = default_filename(safe_id)

        target_dir = self.root / safe_id
        target_dir.mkdir(parents=True, exist_ok=True)
        (target_dir / name).write_bytes(content)
        logger.info(f"Stored ticket PDF: tickets/{safe_id}/{name} ({len(content)} bytes)")

        return TicketUpload(url=ticket_url(safe_id, name), path=f"tickets/{safe_id}/{name}")

    def get_path(self, ticket_id: str, filename: Optional[str] = None) -> Optional[Path]:
        """Resolve a stored PDF, falling back to the legacy location"""
        safe_id = sanitize_ticket_id(ticket_id)
        if not safe_id:
            return None
        name = Path(filename).name if filename else default_filename(safe_id)
        candidates = [self.root / safe_id / name]
        if not filename:
            candidates.append(self.upload_dir / name)
        for path in candidates:
            if path.is_file() and self._inside_uploads(path):
                return path
        return None

    def list_tickets(self) -> List[StoredTicket]:
        """All stored PDFs, newest first"""
        items = []
        for directory in self.root.iterdir():
            if not directory.is_dir():
                continue
            for path in directory.glob("*.pdf"):
                items.append(self._describe(path, directory.name, ticket_url(directory.name, path.name)))

        for path in self.upload_dir.glob("*.pdf"):
            match = LEGACY_NAME_RE.search(path.name)
            ticket_id = match.group(1) if match else None
            url = ticket_url(ticket_id, path.name).split("?")[0] if ticket_id else ""
            items.append(self._describe(path, ticket_id, url))

        items.sort(key=lambda item: item.mtime, reverse=True)
        return items

    @staticmethod
    def _describe(path: Path, ticket_id: Optional[str], url: str) -> StoredTicket:
        stat = path.stat()
        return StoredTicket(
            name=path.name,
            ticket_id=ticket_id,
            size=stat.st_size,
            mtime=datetime.fromtimestamp(stat.st_mtime).isoformat(),
            url=url,
        )

    def delete_for(self, ticket_id: str) -> int:
        """
        Remove every PDF of an order

        Returns:
            Number of files removed
        """
        safe_id = sanitize_ticket_id(ticket_id)
        if not safe_id:
            raise ValueError("Invalid ticket id")

        removed = 0
        directory = self.root / safe_id
        if directory.is_dir():
            removed += len(list(directory.glob("*.pdf")))
            shutil.rmtree(directory)

        legacy = self.upload_dir / default_filename(safe_id)
        if legacy.is_file():
            legacy.unlink()
            removed += 1

        if removed:
            logger.info(f"Deleted {removed} ticket PDF(s) of order {safe_id}")
        return removed

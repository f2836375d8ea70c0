# -*- coding: utf-8 -*-
"""
Service Catalog Store
Service names for autocomplete, JSON file seeded with the default list
"""
import json
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from workorders.models import ServiceRecord
from workorders.services.catalog import DEFAULT_SERVICES

logger = logging.getLogger(__name__)


class DuplicateServiceError(Exception):
    """Service with the same name already exists"""


def normalize_name(name: str) -> str:
    """Trim and collapse inner whitespace"""
    return " ".join((name or "").split())


class ServiceCatalog:
    """Service records in services.json"""

    def __init__(self, data_dir: Path):
        self.path = Path(data_dir) / "services.json"
        self._ensure_file()

    def _ensure_file(self):
        """Create the file seeded with default services"""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if self.path.exists():
            return
        now = datetime.now().isoformat()
        seeded = [
            ServiceRecord(id=str(uuid.uuid4()), name=name, created_at=now, updated_at=now)
            for name in DEFAULT_SERVICES
        ]
        self._write(seeded)
        logger.info(f"Seeded service catalog with {len(seeded)} services")

    def _read(self) -> List[ServiceRecord]:
        self._ensure_file()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except ValueError as e:
            logger.error(f"Error reading {self.path}: {e}")
            return []
        if not isinstance(raw, list):
            return []
        records = []
        for item in raw:
            if not isinstance(item, dict):
                continue
            record_id = str(item.get("id") or "")
            name = normalize_name(str(item.get("name") or ""))
            if record_id and name:
                created = item.get("createdAt") or ""
                records.append(ServiceRecord(
                    id=record_id,
                    name=name,
                    created_at=created,
                    updated_at=item.get("updatedAt") or created,
                ))
        return records

    def _write(self, records: List[ServiceRecord]):
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(
                [record.model_dump(by_alias=True) for record in records],
                f, ensure_ascii=False, indent=2,
            )

    @staticmethod
    def _check_duplicate(records: List[ServiceRecord], name: str, skip_id: str = None):
        lowered = name.lower()
        for record in records:
            if record.id != skip_id and record.name.lower() == lowered:
                raise DuplicateServiceError(f"Service already exists: {name}")

    def list_services(self, query: str = None) -> List[ServiceRecord]:
        records = self._read()
        q = (query or "").strip().lower()
        if not q:
            return records
        return [record for record in records if q in record.name.lower()]

    def list_names(self, query: str = None, limit: int = None) -> List[str]:
        names = [record.name for record in self.list_services(query)]
        return names[:limit] if limit else names

    def create(self, name: str) -> ServiceRecord:
        """
        Add a service

        Raises:
            ValueError: empty name
            DuplicateServiceError: name exists (case-insensitive)
        """
        normalized = normalize_name(name)
        if not normalized:
            raise ValueError("Service name is empty")
        records = self._read()
        self._check_duplicate(records, normalized)

        now = datetime.now().isoformat()
        record = ServiceRecord(id=str(uuid.uuid4()), name=normalized, created_at=now, updated_at=now)
        records.append(record)
        self._write(records)
        logger.info(f"Created service: {normalized}")
        return record

    def update(self, record_id: str, name: str) -> Optional[ServiceRecord]:
        """Rename a service; None if not found"""
        normalized = normalize_name(name)
        if not normalized:
            raise ValueError("Service name is empty")
        records = self._read()
        for index, record in enumerate(records):
            if record.id != record_id:
                continue
            self._check_duplicate(records, normalized, skip_id=record_id)
            updated = record.model_copy(update={
                "name": normalized,
                "updated_at": datetime.now().isoformat(),
            })
            records[index] = updated
            self._write(records)
            return updated
        return None

    def delete(self, record_id: str) -> bool:
        records = self._read()
        remaining = [record for record in records if record.id != record_id]
        if len(remaining) == len(records):
            return False
        self._write(remaining)
        logger.info(f"Deleted service: {record_id}")
        return True

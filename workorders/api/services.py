# -*- coding: utf-8 -*-
"""
Service Catalog API Router
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from workorders.api.deps import get_service_catalog
from workorders.models import ServiceName, ServiceRecord
from workorders.services.service_catalog import DuplicateServiceError, ServiceCatalog

router = APIRouter(prefix="/services", tags=["services"])

SEARCH_LIMIT = 20


@router.get("", response_model=List[str])
async def search_services(
    response: Response,
    q: Optional[str] = Query(None, description="Case-insensitive name search"),
    catalog: ServiceCatalog = Depends(get_service_catalog),
):
    """Service names for autocomplete"""
    response.headers["Cache-Control"] = "no-store"
    if q and q.strip():
        return catalog.list_names(q, limit=SEARCH_LIMIT)
    return catalog.list_names()


@router.get("/records", response_model=List[ServiceRecord])
async def list_service_records(
    q: Optional[str] = Query(None),
    catalog: ServiceCatalog = Depends(get_service_catalog),
):
    """Full records for catalog management"""
    return catalog.list_services(q)


@router.post("", response_model=ServiceRecord, status_code=201)
async def create_service(body: ServiceName, catalog: ServiceCatalog = Depends(get_service_catalog)):
    """Add service name"""
    try:
        return catalog.create(body.name)
    except DuplicateServiceError:
        raise HTTPException(status_code=409, detail="Такая услуга уже существует")
    except ValueError:
        raise HTTPException(status_code=400, detail="Название услуги не может быть пустым")


@router.put("/{record_id}", response_model=ServiceRecord)
async def update_service(
    record_id: str,
    body: ServiceName,
    catalog: ServiceCatalog = Depends(get_service_catalog),
):
    """Rename service"""
    try:
        record = catalog.update(record_id, body.name)
    except DuplicateServiceError:
        raise HTTPException(status_code=409, detail="Такая услуга уже существует")
    except ValueError:
        raise HTTPException(status_code=400, detail="Название услуги не может быть пустым")
    if not record:
        raise HTTPException(status_code=404, detail="Услуга не найдена")
    return record


@router.delete("/{record_id}")
async def delete_service(record_id: str, catalog: ServiceCatalog = Depends(get_service_catalog)):
    """Delete service"""
    if not catalog.delete(record_id):
        raise HTTPException(status_code=404, detail="Услуга не найдена")
    return {"success": True}

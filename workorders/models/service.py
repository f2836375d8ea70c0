# -*- coding: utf-8 -*-
"""
Service Catalog Pydantic Models
"""
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class ServiceRecord(BaseModel):
    """Named shop service offered in autocomplete"""
    id: str = Field(..., description="Record id (uuid)")
    name: str = Field(..., description="Normalised service name")
    created_at: str = Field("", description="Creation time (ISO)")
    updated_at: str = Field("", description="Last update time (ISO)")

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ServiceName(BaseModel):
    """Create / rename request"""
    name: str = Field(..., description="Service name")

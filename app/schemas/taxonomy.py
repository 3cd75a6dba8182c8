# File: app/schemas/taxonomy.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class PollutionType(BaseModel):
    type_id: str
    name: str
    description: Optional[str] = None
    is_active: bool = True
    created_at: str
    updated_at: str


class Sector(BaseModel):
    sector_id: str
    name: str
    description: Optional[str] = None
    is_active: bool = True
    created_at: str
    updated_at: str


class TaxonomyCreateIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=120)
    description: Optional[str] = Field(default=None, max_length=500)
    is_active: bool = True


class PollutionTypeUpdateIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type_id: str
    name: Optional[str] = Field(default=None, max_length=120)
    description: Optional[str] = Field(default=None, max_length=500)
    is_active: Optional[bool] = None


class SectorUpdateIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    sector_id: str
    name: Optional[str] = Field(default=None, max_length=120)
    description: Optional[str] = Field(default=None, max_length=500)
    is_active: Optional[bool] = None

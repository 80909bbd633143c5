"""Registry records as delivered by the hub and their compiled join."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Device(BaseModel):
    """Device registry record."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str | None = None
    name_by_user: str | None = None
    model: str | None = None
    manufacturer: str | None = None
    area_id: str | None = None

    @property
    def display_name(self) -> str:
        return self.name_by_user or self.name or ""


class Entity(BaseModel):
    """Entity registry record."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    entity_id: str
    entity_category: str | None = None
    name: str | None = None
    original_name: str | None = None
    area_id: str | None = None
    device_id: str | None = None

    @property
    def domain(self) -> str:
        return self.entity_id.split(".", 1)[0]

    @property
    def display_name(self) -> str:
        return self.name or self.original_name or ""


class Area(BaseModel):
    """Area registry record."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    area_id: str
    name: str = ""
    floor_id: str | None = None


class CompiledDevice(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = ""
    name: str = ""
    manufacturer: str = ""
    model: str = ""


class CompiledArea(BaseModel):
    model_config = ConfigDict(frozen=True)

    area_id: str = ""
    name: str = ""


class CompiledEntity(BaseModel):
    """An entity joined with its device and area.

    Every device and area field is a plain string; dangling references produce
    empty strings so callers can sort and filter without ``None`` checks.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    entity_id: str
    name: str = ""
    entity_category: str = ""
    shared: bool = False
    device: CompiledDevice = Field(default_factory=CompiledDevice)
    area: CompiledArea = Field(default_factory=CompiledArea)

    @property
    def domain(self) -> str:
        return self.entity_id.split(".", 1)[0]

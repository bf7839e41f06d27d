"""
DishManager Backend — Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the API contract between clients and backend.
Why:   Serialization, OpenAPI doc generation, and a shared Dish shape for the
       REST responses, the broadcast payloads and the client sync layer.
How:   Python attributes are snake_case; the wire format is camelCase via an
       alias generator (`dish_id` ↔ `dishId`).

Input validation note:
    Request bodies declare every field Optional. Missing or blank required
    fields are rejected by DishService with a 400 ValidationError carrying the
    API's own message, instead of FastAPI's generic 422.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ══════════════════════════════════════════════════════════════════════════
# Entity
# ══════════════════════════════════════════════════════════════════════════


class DishSchema(CamelModel):
    """
    What:  Public representation of a dish record.
    Who:   Returned by every dish endpoint and carried in broadcast events.
    """
    dish_id: str = Field(description="Externally assigned unique identifier")
    dish_name: str = Field(description="Display name")
    image_url: str = Field(description="Image URL")
    is_published: bool = Field(default=False, description="Publish flag")
    created_at: Optional[datetime] = Field(default=None, description="Creation time (UTC)")
    updated_at: Optional[datetime] = Field(default=None, description="Last write time (UTC)")

    def to_wire(self) -> Dict[str, Any]:
        """JSON-ready camelCase dict (used for broadcast payloads)."""
        return self.model_dump(by_alias=True, mode="json")


# ══════════════════════════════════════════════════════════════════════════
# Request Bodies
# ══════════════════════════════════════════════════════════════════════════


class DishCreate(CamelModel):
    """Body of POST /api/dishes."""
    dish_id: Optional[str] = None
    dish_name: Optional[str] = None
    image_url: Optional[str] = None
    is_published: Optional[bool] = None


class DishUpdate(CamelModel):
    """
    Body of PUT /api/dishes/{dishId}.

    Only fields present in the body are applied (see `supplied_fields`).
    A `dishId` in the body is ignored: the identifier is immutable.
    """
    dish_name: Optional[str] = None
    image_url: Optional[str] = None
    is_published: Optional[bool] = None

    def supplied_fields(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


# ══════════════════════════════════════════════════════════════════════════
# Response Envelopes
# ══════════════════════════════════════════════════════════════════════════


class DishListResponse(BaseModel):
    """GET /api/dishes → {success, count, data}."""
    success: bool = True
    count: int
    data: List[DishSchema]


class DishResponse(BaseModel):
    """Create / update / toggle → {success, message, data}."""
    success: bool = True
    message: str
    data: DishSchema


class DeleteResponse(BaseModel):
    """DELETE → {success, message, data: {}}."""
    success: bool = True
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """
    Uniform error envelope for all API errors.

    Example:
        {"success": false, "message": "Dish with ID dish-404 not found"}
    """
    success: bool = False
    message: str
    error: Optional[str] = None


class HealthResponse(BaseModel):
    """GET /api/health → {success, message, timestamp}."""
    success: bool = True
    message: str
    timestamp: str

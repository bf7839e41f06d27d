"""
DishManager Backend — Dish Route Handlers
==========================================

What:  REST surface for dishes under /api/dishes.
How:   Parses the body, delegates to DishService with the request's session
       and the application's broadcaster, wraps the result in the
       {success, message, data} envelope.
Who:   Called by dashboards and by the Python client sync layer.

Route Inventory:
    GET    /api/dishes                  List (ordered by name)
    POST   /api/dishes                  Create          → dish-created
    PUT    /api/dishes/{dishId}         Partial update  → dish-updated
    DELETE /api/dishes/{dishId}         Delete          → dish-deleted
    PUT    /api/dishes/{dishId}/toggle  Flip publish    → publish-status-updated
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dishmanager.database import get_db_session
from dishmanager.dependencies import get_broadcaster
from dishmanager.schemas.dish import (
    DeleteResponse,
    DishCreate,
    DishListResponse,
    DishResponse,
    DishUpdate,
    ErrorResponse,
)
from dishmanager.services.broadcast_base import BroadcastPublisher
from dishmanager.services.dish_service import dish_service

router = APIRouter(prefix="/api/dishes", tags=["Dishes"])

NOT_FOUND = {404: {"description": "Dish not found", "model": ErrorResponse}}
BAD_REQUEST = {400: {"description": "Invalid input", "model": ErrorResponse}}
SERVER_ERROR = {500: {"description": "Store error", "model": ErrorResponse}}


@router.get("/", response_model=DishListResponse, include_in_schema=False)
@router.get(
    "",
    response_model=DishListResponse,
    responses={**SERVER_ERROR},
    summary="List all dishes ordered by name",
)
async def list_dishes(db: AsyncSession = Depends(get_db_session)) -> DishListResponse:
    dishes = await dish_service.list_dishes(db)
    return DishListResponse(success=True, count=len(dishes), data=dishes)


@router.post("/", status_code=201, response_model=DishResponse, include_in_schema=False)
@router.post(
    "",
    status_code=201,
    response_model=DishResponse,
    responses={**BAD_REQUEST, **SERVER_ERROR},
    summary="Create a dish",
    description=(
        "Requires dishId, dishName and imageUrl; isPublished defaults to false. "
        "A dishId that already exists is rejected with 400 and nothing is written."
    ),
)
async def create_dish(
    payload: Optional[DishCreate] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
    broadcaster: BroadcastPublisher = Depends(get_broadcaster),
) -> DishResponse:
    dish = await dish_service.create_dish(db, payload or DishCreate(), broadcaster)
    return DishResponse(success=True, message="Dish created successfully", data=dish)


@router.put(
    "/{dish_id}",
    response_model=DishResponse,
    responses={**BAD_REQUEST, **NOT_FOUND, **SERVER_ERROR},
    summary="Update a dish (only supplied fields change)",
)
async def update_dish(
    dish_id: str,
    payload: Optional[DishUpdate] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
    broadcaster: BroadcastPublisher = Depends(get_broadcaster),
) -> DishResponse:
    dish = await dish_service.update_dish(db, dish_id, payload or DishUpdate(), broadcaster)
    return DishResponse(success=True, message="Dish updated successfully", data=dish)


@router.delete(
    "/{dish_id}",
    response_model=DeleteResponse,
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Delete a dish permanently",
)
async def delete_dish(
    dish_id: str,
    db: AsyncSession = Depends(get_db_session),
    broadcaster: BroadcastPublisher = Depends(get_broadcaster),
) -> DeleteResponse:
    await dish_service.delete_dish(db, dish_id, broadcaster)
    return DeleteResponse(success=True, message="Dish deleted successfully", data={})


@router.put(
    "/{dish_id}/toggle",
    response_model=DishResponse,
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Flip the publish status of a dish",
)
async def toggle_publish_status(
    dish_id: str,
    db: AsyncSession = Depends(get_db_session),
    broadcaster: BroadcastPublisher = Depends(get_broadcaster),
) -> DishResponse:
    dish = await dish_service.toggle_publish(db, dish_id, broadcaster)
    state = "published" if dish.is_published else "unpublished"
    return DishResponse(success=True, message=f"Dish {state} successfully", data=dish)

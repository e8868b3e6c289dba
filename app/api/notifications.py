from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from app.core.dependencies import get_current_user, get_notification_service, get_page_params
from app.models.notification import NotificationType
from app.schemas.common import Page, PageParams
from app.schemas.notification import MarkAllReadOut, NotificationOut, UnreadCountOut
from app.schemas.user import CurrentUser
from app.services.notifications import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=Page[NotificationOut])
async def list_notifications(
    unread_only: bool = Query(False, alias="unreadOnly"),
    type: Optional[NotificationType] = None,
    params: PageParams = Depends(get_page_params),
    user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    """The caller's notifications, newest first."""
    return await service.list_notifications(user.id, params, unread_only=unread_only, type=type)


@router.get("/unread-count", response_model=UnreadCountOut)
async def unread_count(
    user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return UnreadCountOut(count=await service.unread_count(user.id))


@router.put("/read-all", response_model=MarkAllReadOut)
async def mark_all_read(
    user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return MarkAllReadOut(updated=await service.mark_all_as_read(user.id))


@router.put("/{notification_id:int}/read", response_model=NotificationOut)
async def mark_read(
    notification_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return await service.mark_as_read(notification_id, user.id)


@router.delete("/{notification_id:int}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    await service.delete_notification(notification_id, user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

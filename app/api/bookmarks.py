from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from app.core.dependencies import get_bookmark_service, get_current_user, get_page_params
from app.schemas.bookmark import BookmarkFolderIn, BookmarkFolderOut, BookmarkOut, MoveBookmarkIn, MoveBookmarkOut
from app.schemas.common import Page, PageParams
from app.schemas.user import CurrentUser
from app.services.bookmarks import BookmarkService

router = APIRouter(prefix="/users/me", tags=["bookmarks"])


# ───────────────────────────────────────── bookmarks ───────────────────────────────────────
@router.get("/bookmarks", response_model=Page[BookmarkOut])
async def list_my_bookmarks(
    folder_id: Optional[int] = Query(None, alias="folderId"),
    search: Optional[str] = None,
    params: PageParams = Depends(get_page_params),
    user: CurrentUser = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
):
    """The caller's bookmarks, optionally limited to one folder and/or a search term."""
    return await service.list_bookmarks(user.id, params, folder_id=folder_id, search=search)


@router.put("/bookmarks/{bookmark_id:int}/folder", response_model=MoveBookmarkOut)
async def move_bookmark(
    bookmark_id: int,
    payload: MoveBookmarkIn,
    user: CurrentUser = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
):
    """Move a bookmark into a folder; ``folderId: null`` makes it uncategorized."""
    return await service.move_bookmark(bookmark_id, user.id, payload.folder_id)


# ───────────────────────────────────────── folders ─────────────────────────────────────────
@router.get("/bookmark-folders", response_model=List[BookmarkFolderOut])
async def list_folders(
    user: CurrentUser = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
):
    return await service.list_folders(user.id)


@router.post("/bookmark-folders", response_model=BookmarkFolderOut, status_code=status.HTTP_201_CREATED)
async def create_folder(
    payload: BookmarkFolderIn,
    user: CurrentUser = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
):
    return await service.create_folder(user.id, payload)


@router.put("/bookmark-folders/{folder_id:int}", response_model=BookmarkFolderOut)
async def update_folder(
    folder_id: int,
    payload: BookmarkFolderIn,
    user: CurrentUser = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
):
    return await service.update_folder(folder_id, user.id, payload)


@router.delete("/bookmark-folders/{folder_id:int}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_folder(
    folder_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
):
    """Delete a folder; its bookmarks are kept and become uncategorized."""
    await service.delete_folder(folder_id, user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

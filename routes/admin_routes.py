from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, File, Form, Query, UploadFile

from app_instance import get_portfolio, get_store, get_upload_manager, get_upload_service
from controllers.content_controller import (
    add_record,
    delete_message,
    delete_record,
    get_record,
    list_messages,
    refresh_section,
    update_record,
    upsert_singleton,
)
from controllers.upload_controller import cancel_upload, start_upload
from models.content_model import Section
from services.content_store import ContentStore
from services.portfolio_cache import PortfolioCache
from services.upload_manager import UploadManager
from services.upload_service import UploadService

router = APIRouter(prefix="/api/admin", tags=["admin"])


# Fixed paths are registered before the generic /{section} routes


@router.get("/messages")
async def get_messages(store: ContentStore = Depends(get_store)):
    return await list_messages(store)


@router.delete("/messages/{message_id}")
async def remove_message(message_id: str, store: ContentStore = Depends(get_store)):
    return await delete_message(message_id, store)


@router.post("/uploads")
async def upload_file(
    file: UploadFile = File(...),
    folder: str = Form("images"),
    stream: bool = Query(False, description="Stream NDJSON progress events"),
    uploads: UploadService = Depends(get_upload_service),
    manager: UploadManager = Depends(get_upload_manager),
):
    return await start_upload(file, folder, stream, uploads, manager)


@router.delete("/uploads/{upload_id}")
async def stop_upload(upload_id: str, manager: UploadManager = Depends(get_upload_manager)):
    return await cancel_upload(upload_id, manager)


@router.post("/refresh/{section}")
async def refresh(section: Section, portfolio: PortfolioCache = Depends(get_portfolio)):
    return await refresh_section(section, portfolio)


@router.put("/hero")
async def save_hero(payload: Dict[str, Any] = Body(...), portfolio: PortfolioCache = Depends(get_portfolio)):
    return await upsert_singleton(Section.HERO, payload, portfolio)


@router.put("/about")
async def save_about(payload: Dict[str, Any] = Body(...), portfolio: PortfolioCache = Depends(get_portfolio)):
    return await upsert_singleton(Section.ABOUT, payload, portfolio)


@router.post("/{section}")
async def create(section: Section, payload: Dict[str, Any] = Body(...), portfolio: PortfolioCache = Depends(get_portfolio)):
    return await add_record(section, payload, portfolio)


@router.get("/{section}/{record_id}")
async def read(section: Section, record_id: str, portfolio: PortfolioCache = Depends(get_portfolio)):
    return await get_record(section, record_id, portfolio)


@router.patch("/{section}/{record_id}")
async def update(
    section: Section,
    record_id: str,
    payload: Dict[str, Any] = Body(...),
    portfolio: PortfolioCache = Depends(get_portfolio),
):
    return await update_record(section, record_id, payload, portfolio)


@router.delete("/{section}/{record_id}")
async def delete(section: Section, record_id: str, portfolio: PortfolioCache = Depends(get_portfolio)):
    return await delete_record(section, record_id, portfolio)

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from app_instance import get_portfolio, get_store, get_upload_service
from config.db import get_database
from controllers.admin_controller import login_admin
from controllers.content_controller import get_portfolio_snapshot, get_section_snapshot, submit_contact_message
from controllers.upload_controller import download_file
from models.content_model import ContactMessage, Section
from services.content_store import ContentStore
from services.portfolio_cache import PortfolioCache
from services.upload_service import UploadService
from validation.content_types import AdminLogin

router = APIRouter(prefix="/api", tags=["public"])


@router.post("/auth/login")
async def admin_login(credentials: AdminLogin, db: AsyncIOMotorDatabase = Depends(get_database)):
    return await login_admin(credentials, db)


@router.get("/portfolio")
async def get_portfolio_data(portfolio: PortfolioCache = Depends(get_portfolio)):
    return await get_portfolio_snapshot(portfolio)


@router.get("/portfolio/{section}")
async def get_section_data(section: Section, portfolio: PortfolioCache = Depends(get_portfolio)):
    return await get_section_snapshot(section, portfolio)


@router.post("/contact")
async def contact(payload: ContactMessage, store: ContentStore = Depends(get_store)):
    return await submit_contact_message(payload, store)


@router.get("/files/{file_id}")
async def get_file(file_id: str, uploads: UploadService = Depends(get_upload_service)):
    return await download_file(file_id, uploads)

from fastapi import APIRouter, Depends, Form, status
from fastapi.responses import RedirectResponse
from motor.motor_asyncio import AsyncIOMotorDatabase

from app_instance import get_portfolio
from config.db import get_database
from config.env_config import ENVIRONMENT, JWT_EXPIRATION_MINUTES
from controllers.admin_controller import authenticate_admin
from controllers.page_controller import render_dashboard, render_home, render_login
from middlewares.verify_admin import ACCESS_TOKEN_COOKIE, optional_admin
from services.portfolio_cache import PortfolioCache
from utils.exceptions import AuthError
from validation.content_types import AdminLogin

router = APIRouter(tags=["pages"])


@router.get("/")
async def home(portfolio: PortfolioCache = Depends(get_portfolio)):
    return render_home(portfolio)


@router.get("/admin/login")
async def login_page(admin: dict | None = Depends(optional_admin)):
    if admin:
        return RedirectResponse("/admin/dashboard", status_code=status.HTTP_303_SEE_OTHER)
    return render_login()


@router.post("/admin/login")
async def login_form(
    email: str = Form(...),
    password: str = Form(...),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    try:
        token, _ = await authenticate_admin(AdminLogin(email=email, password=password), db)
    except AuthError as e:
        return render_login(error=e.message, email=email)

    response = RedirectResponse("/admin/dashboard", status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        token,
        max_age=JWT_EXPIRATION_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=ENVIRONMENT != "Development",
    )
    return response


@router.get("/admin/logout")
async def logout():
    response = RedirectResponse("/admin/login", status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(ACCESS_TOKEN_COOKIE)
    return response


@router.get("/admin/dashboard")
async def dashboard(
    admin: dict | None = Depends(optional_admin),
    portfolio: PortfolioCache = Depends(get_portfolio),
):
    if not admin:
        return RedirectResponse("/admin/login", status_code=status.HTTP_303_SEE_OTHER)
    return render_dashboard(admin, portfolio)

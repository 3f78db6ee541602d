from fastapi import status
from fastapi.responses import HTMLResponse

from config.jinja_env import render_template
from services.portfolio_cache import PortfolioCache
from utils.convert_objectIds import convert_objectids


def render_home(portfolio: PortfolioCache) -> HTMLResponse:
    html = render_template(
        "index.html",
        hero=portfolio.hero_or_default(),
        about=portfolio.about_or_default(),
        skills_by_category=portfolio.skills_by_category(),
        experiences=portfolio.experiences,
        projects=portfolio.projects,
        certificates=portfolio.certificates,
        achievements=portfolio.achievements,
        loading=portfolio.loading,
        errors=portfolio.errors,
    )
    return HTMLResponse(content=html, status_code=status.HTTP_200_OK)


def render_login(error: str | None = None, email: str = "") -> HTMLResponse:
    html = render_template("admin_login.html", error=error, email=email)
    return HTMLResponse(
        content=html,
        status_code=status.HTTP_401_UNAUTHORIZED if error else status.HTTP_200_OK
    )


def render_dashboard(admin: dict, portfolio: PortfolioCache) -> HTMLResponse:
    admin = convert_objectids({k: v for k, v in admin.items() if k != "password"})
    html = render_template(
        "admin_dashboard.html",
        admin=admin,
        snapshot=portfolio.snapshot(),
        states={name: state.value for name, state in portfolio.state.items()},
    )
    return HTMLResponse(content=html, status_code=status.HTTP_200_OK)


def render_not_found() -> HTMLResponse:
    return HTMLResponse(content=render_template("not_found.html"), status_code=status.HTTP_404_NOT_FOUND)

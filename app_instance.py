from fastapi import FastAPI, Request
from services.content_store import ContentStore
from services.portfolio_cache import PortfolioCache
from services.upload_manager import UploadManager
from services.upload_service import UploadService

app = FastAPI(title="Portfolio API")
app.state.upload_manager = UploadManager()


def attach_services(target: FastAPI, db, uploads: UploadService | None = None) -> PortfolioCache:
    """Build the store, the shared portfolio cache and the upload service for ``db``."""
    store = ContentStore(db)
    target.state.store = store
    target.state.portfolio = PortfolioCache(store)
    target.state.uploads = uploads or UploadService.from_database(db)
    return target.state.portfolio


# Dependencies for FastAPI
def get_store(request: Request) -> ContentStore:
    return request.app.state.store


def get_portfolio(request: Request) -> PortfolioCache:
    return request.app.state.portfolio


def get_upload_service(request: Request) -> UploadService:
    return request.app.state.uploads


def get_upload_manager(request: Request) -> UploadManager:
    return request.app.state.upload_manager

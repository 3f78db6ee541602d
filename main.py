from fastapi import Depends, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app_instance import app, attach_services
from config.db import get_database, init_db
from config.env_config import CORS_ORIGINS
from config.log_config import get_logger
from controllers.admin_controller import ensure_admin_account
from controllers.page_controller import render_not_found
from middlewares.verify_admin import auth_required as AuthMiddleware
from routes.admin_routes import router as admin_router
from routes.page_routes import router as page_router
from routes.public_routes import router as public_router
from utils.exceptions import AuthError, StoreError, UploadError

logger = get_logger("main")


app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Every failure ends here as a dismissible notice for the client; nothing is retried


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error on {request.url.path}\n{exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_406_NOT_ACCEPTABLE,
        content={"message": "Invalid input", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(ValidationError)
async def record_validation_exception_handler(request: Request, exc: ValidationError):
    logger.warning(f"Invalid {exc.title} on {request.url.path}\n{exc}")
    return JSONResponse(
        status_code=status.HTTP_406_NOT_ACCEPTABLE,
        content={"message": "Invalid input", "details": exc.errors(include_url=False, include_context=False)},
    )


@app.exception_handler(StoreError)
async def store_exception_handler(request: Request, exc: StoreError):
    logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}\n{exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(AuthError)
async def auth_exception_handler(request: Request, exc: AuthError):
    return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"message": exc.message})


@app.exception_handler(UploadError)
async def upload_exception_handler(request: Request, exc: UploadError):
    logger.warning(f"Upload failed: {exc.message}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND and not request.url.path.startswith("/api"):
        return render_not_found()
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.on_event("startup")
async def on_startup():
    db = get_database()
    try:
        await init_db(db)
        await ensure_admin_account(db)
    except PyMongoError as e:
        # the site still renders its default content without the store
        logger.error(f"Database initialization failed: {e}")

    portfolio = attach_services(app, db)
    await portfolio.initialize()


@app.on_event("shutdown")
async def on_shutdown():
    app.state.upload_manager.cancel_all()


app.include_router(page_router)
app.include_router(public_router)

# Admin authentication required for admin routes
app.include_router(admin_router, dependencies=[Depends(AuthMiddleware)])

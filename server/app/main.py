from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi import APIRouter

from .config import Settings, get_settings
from .container import Container

# API routers
from .api.chats import router as chats_router
from .api.messages import router as messages_router
from .api.upload import router as upload_router
from .core.logging import setup_logging


def create_app(settings: Optional[Settings] = None, container: Optional[Container] = None) -> FastAPI:
    settings = settings or get_settings()
    # Setup logging early
    setup_logging(settings.log_level)
    app = FastAPI(title="DreamBees Server", version="0.1.0")

    app.state.container = container or Container(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(o).rstrip("/") for o in settings.allowed_origins],
        # Robust local dev: allow both localhost and 127.0.0.1 on the dev port via regex
        allow_origin_regex=r"https?://(localhost|127\.0\.0\.1):5000",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Malformed ids and bodies are client errors, reported as 400
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    api = APIRouter()
    api.include_router(chats_router)
    api.include_router(messages_router)
    api.include_router(upload_router)
    app.include_router(api, prefix="/api")

    @app.on_event("startup")
    async def _startup() -> None:
        await app.state.container.startup()

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await app.state.container.shutdown()

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.get("/")
    def root():
        return {"service": "dreambees", "version": "0.1.0"}

    return app


app = create_app()

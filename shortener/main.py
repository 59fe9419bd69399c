import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from shortener.codes import CodeGenerator, is_valid_code
from shortener.config import Settings
from shortener.database import init_db, make_engine, make_session_factory
from shortener.exceptions import (
    InvalidURLError,
    LinkNotFoundError,
    RetriesExhaustedError,
    StorageError,
)
from shortener.logging_config import setup_logging
from shortener.middleware import LoggingMiddleware
from shortener.schemas import HealthResponse, LinkInfoResponse, LinkResponse, ShortenRequest
from shortener.service import ShortenerService
from shortener.store import LinkStore

logger = logging.getLogger(__name__)


def get_service(request: Request) -> ShortenerService:
    return request.app.state.service


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Builds the application, its database pool and the shortener service."""
    settings = settings or Settings()
    setup_logging(settings.log_level)

    engine = make_engine(settings)
    init_db(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        engine.dispose()

    app = FastAPI(
        title="URL Shortener",
        description="Short codes for long URLs with hit counting",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.service = ShortenerService(
        store=LinkStore(make_session_factory(engine)),
        generator=CodeGenerator(settings.code_length),
        base_url=settings.base_url,
        max_attempts=settings.max_create_attempts,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    @app.get("/api/health", response_model=HealthResponse)
    def health():
        return HealthResponse()

    @app.post("/api/shorten", response_model=LinkResponse, status_code=status.HTTP_201_CREATED)
    def shorten(payload: ShortenRequest, service: ShortenerService = Depends(get_service)):
        """
        Creates a short link for an http(s) URL.
        Colliding codes are regenerated a bounded number of times.
        """
        try:
            return service.shorten(payload.url)
        except InvalidURLError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Provide a valid http(s) URL in 'url'."
            )
        except RetriesExhaustedError:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Could not generate a unique short code"
            )
        except StorageError:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Database error")

    @app.get("/api/info/{code}", response_model=LinkInfoResponse)
    def info(
        code: str,
        service: ShortenerService = Depends(get_service),
    ):
        """
        Returns the link behind a code together with its hit count.
        """
        try:
            if not is_valid_code(code):
                raise LinkNotFoundError(code)
            return service.info(code)
        except LinkNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Code not found")
        except StorageError:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Database error")

    @app.get("/{code}", response_class=RedirectResponse)
    def redirect(
        code: str,
        background_tasks: BackgroundTasks,
        service: ShortenerService = Depends(get_service),
    ):
        """
        Redirects to the original URL. The hit is counted after the response
        is sent and a failed count never affects the redirect.
        """
        try:
            if not is_valid_code(code):
                raise LinkNotFoundError(code)
            target = service.redirect(code, background_tasks.add_task)
        except LinkNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Short URL not found")
        except StorageError:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server error")

        return RedirectResponse(url=target, status_code=status.HTTP_302_FOUND)

    return app

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from routes.cart_route import router as cart_router
from routes.fitting_route import router as fitting_router
from services.cart.catalog import ProductCatalog
from services.cart.expiry_reaper import ExpiryReaper
from services.cart.session_store import SessionStore
from services.fitting.image_loader import ImageLoader
from services.fitting.input_controller import InputController
from services.fitting.surface import CanvasSurface
from services.fitting.workspace_store import FittingWorkspaceStore
from utils.settings import AppSettings

load_dotenv()  # Load environment variables from .env file if present

LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to build the in-memory stores:
      - the product catalog and the session cart store
      - the fitting workspace registry and image loader
      - the expiry reaper task sweeping idle sessions and workspaces
    and attach them to `app.state`.
    """
    settings: AppSettings = app.state.settings

    catalog = ProductCatalog()
    session_store = SessionStore(catalog, enforce_options=settings.enforce_product_options)

    def new_workspace() -> InputController:
        surface = CanvasSurface(
            settings.canvas_width,
            settings.canvas_height,
            settings.canvas_device_pixel_ratio,
        )
        return InputController(surface, fill_color=settings.canvas_fill_color)

    workspace_store = FittingWorkspaceStore(new_workspace)
    reaper = ExpiryReaper(
        [session_store, workspace_store],
        ttl_seconds=settings.session_ttl_seconds,
        interval_seconds=settings.reaper_interval_seconds,
    )

    app.state.catalog = catalog
    app.state.session_store = session_store
    app.state.workspace_store = workspace_store
    app.state.image_loader = ImageLoader(max_pixels=settings.max_image_pixels)
    app.state.reaper = reaper

    reaper_task = asyncio.create_task(reaper.run_periodic())
    LOGGER.info(
        "Cart service ready: ttl=%ss sweep every %ss",
        settings.session_ttl_seconds,
        settings.reaper_interval_seconds,
    )
    try:
        yield
    finally:
        reaper_task.cancel()
        await asyncio.gather(reaper_task, return_exceptions=True)


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse({"error": message}, status_code=400)


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    settings = settings or AppSettings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Virtual Fitting & NFC Cart", lifespan=lifespan)
    app.state.settings = settings

    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    public_dir = settings.public_dir

    @app.get("/", include_in_schema=False)
    async def serve_index():
        """
        Serve the frontend index page from the public directory.
        """
        index_path = public_dir / "index.html"
        if not index_path.exists():
            raise HTTPException(status_code=404, detail="Frontend not found")
        return FileResponse(index_path)

    @app.get("/health")
    async def health(request: Request):
        """
        Report store sizes; a missing store means the lifespan has not run.
        """
        state = request.app.state
        session_store = getattr(state, "session_store", None)
        workspace_store = getattr(state, "workspace_store", None)
        return {
            "ok": session_store is not None and workspace_store is not None,
            "sessions": len(session_store) if session_store is not None else 0,
            "workspaces": len(workspace_store) if workspace_store is not None else 0,
        }

    # Register application routers
    app.include_router(cart_router)
    app.include_router(fitting_router)

    # Serve static assets last so API routes take precedence.
    if public_dir.exists():
        app.mount("/public", StaticFiles(directory=public_dir), name="public")

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=3000)

import inspect
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from routes.chat_route import router as chat_router
from routes.damage_route import router as damage_router
from routes.image_route import router as image_router
from routes.session_route import router as session_router
from services.chat_handler import ChatHandler
from services.damage.analysis_handler import DamageAnalysisHandler
from services.gemini.generator import GeminiGenerator, TextGenerator
from services.image_store import ImageStore
from services.session.orchestrator import ClientOrchestrator
from services.session.session_store import SessionStore
from utils.config import get_gemini_api_key, get_log_level

BASE_DIR = Path(__file__).resolve().parent
PUBLIC_DIR = BASE_DIR / "public"

load_dotenv()  # Load environment variables from .env file if present

logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
LOGGER = logging.getLogger(__name__)


async def _close_generator(generator: Optional[TextGenerator]) -> None:
    """Close the Gemini async client if it exposes a close/aclose method."""
    client = getattr(generator, "client", None)
    aio = getattr(client, "aio", None)
    aclose = getattr(aio, "aclose", None) or getattr(client, "close", None)
    if aclose is None:
        return
    try:
        result = aclose()
        if inspect.isawaitable(result):
            await result
    except Exception as exc:  # pylint: disable=broad-exception-caught
        # Shutdown errors must not mask whatever ended the app.
        LOGGER.warning("Error while closing the Gemini client: %s", exc)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - the Gemini text generator (left unset when GEMINI_API_KEY is missing,
        so requests report a configuration error instead of the app failing)
      - the session store, which gives every browser session its own
        orchestrator and thumbnail store
    and attach them to `app.state`.
    """
    owns_generator = False
    generator: Optional[TextGenerator] = getattr(app.state, "generator", None)
    if generator is None:
        api_key = get_gemini_api_key()
        if api_key:
            generator = GeminiGenerator.from_api_key(api_key)
            owns_generator = True
        else:
            LOGGER.error("GEMINI_API_KEY environment variable is not set")
    app.state.generator = generator

    chat_handler = ChatHandler(generator)
    damage_handler = DamageAnalysisHandler(generator)
    app.state.session_store = SessionStore(
        lambda: ClientOrchestrator(chat_handler, damage_handler, image_store=ImageStore())
    )

    try:
        yield
    finally:
        if owns_generator:
            await _close_generator(generator)
            app.state.generator = None


def create_app(generator: Optional[TextGenerator] = None) -> FastAPI:
    """
    Create and configure the FastAPI application instance.

    A `generator` passed here is used instead of building a Gemini client.
    """
    app = FastAPI(lifespan=lifespan)
    app.state.generator = generator

    # Serve static assets from the public directory, if it exists.
    if PUBLIC_DIR.exists():
        app.mount("/public", StaticFiles(directory=PUBLIC_DIR), name="public")

    @app.get("/", include_in_schema=False)
    async def serve_index():
        """
        Serve the frontend index page from the public directory.
        """
        index_path = PUBLIC_DIR / "index.html"
        if not index_path.exists():
            raise HTTPException(status_code=404, detail="Frontend not found")
        return FileResponse(index_path)

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check reporting whether a Gemini generator is configured.
        """
        has_generator = getattr(request.app.state, "generator", None) is not None
        return {"ok": True, "gemini_configured": has_generator}

    # Register application routers
    app.include_router(chat_router)
    app.include_router(damage_router)
    app.include_router(session_router)
    app.include_router(image_router)

    return app


app = create_app()

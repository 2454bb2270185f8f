# Standard library imports
from pathlib import Path
from contextlib import asynccontextmanager
import logging

# External package imports
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

# Local application imports
from .api.v1 import face_router, guest_router, messaging_router, notifications_router, photo_router
from .core.config import get_settings
from .di.container import get_container
from .domain.repositories.identity_store import IdentityStore
from .infrastructure.db.mongo_connection import close_client
from .infrastructure.http_client_factory import close_shared_http_client
from .infrastructure.messaging import MessagingSessionManager
from .infrastructure.storage import MEDIA_URL_PREFIX

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events.

    Ensures MongoDB indexes and starts the messaging session on startup;
    stops the session and closes pooled connections on shutdown.
    """
    container = get_container()

    identity_store = container.get(IdentityStore)
    try:
        await identity_store.ensure_indexes()
    except Exception as e:
        # Requests will surface database errors individually
        logger.error(f"Failed to ensure MongoDB indexes: {e}", exc_info=True)

    session_manager = container.get(MessagingSessionManager)
    if session_manager is not None:
        try:
            await session_manager.start()
            logger.info("Messaging session manager started during application startup")
        except Exception as e:
            # Don't fail app startup if the chat bridge is unavailable
            logger.error(f"Failed to start messaging session manager: {e}", exc_info=True)
    else:
        logger.info("Messaging disabled; guests will not receive chat notifications")

    yield

    if session_manager is not None:
        try:
            await session_manager.stop()
        except Exception as e:
            logger.error(f"Error stopping messaging session manager: {e}", exc_info=True)

    await close_shared_http_client()
    close_client()
    logger.info("Application shutdown complete")


def create_application() -> FastAPI:
    """
    Create and configure FastAPI application.

    This function sets up the FastAPI application with:
    - Environment variable loading
    - CORS middleware configuration
    - Static serving of stored photos under /media
    - API route registration

    Returns:
        Configured FastAPI application instance
    """
    # Load environment variables from .env file
    env_path = Path(__file__).resolve().parent.parent / ".env"
    load_dotenv(env_path)
    settings = get_settings()

    application = FastAPI(
        title="EventPix API",
        version="1.0.0",
        description="Event photo sharing with face-based guest search",
        lifespan=lifespan
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    storage_dir = Path(settings.storage_dir)
    storage_dir.mkdir(parents=True, exist_ok=True)
    application.mount(MEDIA_URL_PREFIX, StaticFiles(directory=str(storage_dir)), name="media")

    # Register API routers
    application.include_router(photo_router, prefix="/api/v1/photos")
    application.include_router(face_router, prefix="/api/v1/faces")
    application.include_router(guest_router, prefix="/api/v1/guests")
    application.include_router(messaging_router, prefix="/api/v1/messaging")
    application.include_router(notifications_router, prefix="/api/v1/notifications")

    return application


# Create application instance
app = create_application()

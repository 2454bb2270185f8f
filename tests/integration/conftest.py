"""
Fixtures for API tests: the real routers and use cases on top of the
in-memory identity store, local storage under tmp_path and a mocked detector.
"""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from eventpix.application.services.auto_tag_propagator import AutoTagPropagator
from eventpix.application.services.matching_engine import MatchingEngine
from eventpix.application.use_cases.face import NameFaceUseCase
from eventpix.application.use_cases.guest import (
    DeleteGuestUseCase,
    ListGuestsUseCase,
    RegisterGuestUseCase,
    SearchGuestPhotosUseCase,
    UpsertGuestUseCase,
)
from eventpix.application.use_cases.messaging import GetPairingStatusUseCase, RestartMessagingUseCase
from eventpix.application.use_cases.photo import (
    DeletePhotoUseCase,
    ListPhotoFacesUseCase,
    ListPhotosUseCase,
    UploadPhotoUseCase,
)
from eventpix.di.base_container import BaseContainer
from eventpix.domain.repositories.face_detector import FaceDetector
from eventpix.domain.repositories.identity_store import IdentityStore
from eventpix.infrastructure.messaging import MessagingSessionManager
from eventpix.infrastructure.notifications import NotificationFanout, WebSocketManager
from eventpix.infrastructure.storage import LocalObjectStorage

CONTROLLER_MODULES = [
    "eventpix.main",
    "eventpix.api.v1.photo_controller",
    "eventpix.api.v1.face_controller",
    "eventpix.api.v1.guest_controller",
    "eventpix.api.v1.messaging_controller",
    "eventpix.api.v1.notifications_controller",
]


@pytest.fixture
def detector():
    mock = MagicMock(spec=FaceDetector)
    mock.detect_faces = AsyncMock(return_value=[])
    return mock


@pytest.fixture
def session_manager():
    """None means messaging disabled; tests may replace it before building the container."""
    return None


@pytest.fixture
def container(store, detector, session_manager, tmp_path):
    container = BaseContainer()
    storage = LocalObjectStorage(str(tmp_path / "media"))
    engine = MatchingEngine(store, embedding_dimension=4)
    websocket_manager = WebSocketManager()
    fanout = NotificationFanout(websocket_manager, session_manager, public_base_url="http://testserver")

    container.register_singleton(IdentityStore, store)
    container.register_singleton(WebSocketManager, websocket_manager)
    container.register_singleton(MessagingSessionManager, session_manager)
    container.register_singleton(NotificationFanout, fanout)
    container.register_factory(UploadPhotoUseCase, lambda: UploadPhotoUseCase(store, storage, detector, engine, fanout))
    container.register_factory(ListPhotosUseCase, lambda: ListPhotosUseCase(store))
    container.register_factory(ListPhotoFacesUseCase, lambda: ListPhotoFacesUseCase(store))
    container.register_factory(DeletePhotoUseCase, lambda: DeletePhotoUseCase(store, storage, fanout))
    container.register_factory(NameFaceUseCase, lambda: NameFaceUseCase(AutoTagPropagator(store), store, fanout))
    container.register_factory(RegisterGuestUseCase, lambda: RegisterGuestUseCase(store, storage, detector, engine))
    container.register_factory(SearchGuestPhotosUseCase, lambda: SearchGuestPhotosUseCase(detector, engine))
    container.register_factory(UpsertGuestUseCase, lambda: UpsertGuestUseCase(store))
    container.register_factory(ListGuestsUseCase, lambda: ListGuestsUseCase(store))
    container.register_factory(DeleteGuestUseCase, lambda: DeleteGuestUseCase(store))
    container.register_factory(GetPairingStatusUseCase, lambda: GetPairingStatusUseCase(session_manager))
    container.register_factory(RestartMessagingUseCase, lambda: RestartMessagingUseCase(session_manager))
    return container


@pytest.fixture
def client(container):
    """TestClient with every controller (and the lifespan) resolving the test container."""
    from eventpix.main import app

    patches = [patch(f"{module}.get_container", return_value=container) for module in CONTROLLER_MODULES]
    for patcher in patches:
        patcher.start()
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        for patcher in patches:
            patcher.stop()

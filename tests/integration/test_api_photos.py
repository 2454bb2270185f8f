"""
Integration tests for the photo, face and notification endpoints.
"""
import pytest

from eventpix.domain.exceptions import DatabaseError, DetectionServiceError
from eventpix.domain.models.face import BoundingBox, DetectedFace
from tests.fakes import at_distance, make_image_bytes, unit

pytestmark = pytest.mark.integration

E1 = unit(1, 0, 0, 0)
E2 = unit(0, 1, 0, 0)
JPEG = make_image_bytes(120, 80)


def detected(embedding, confidence=0.95):
    return DetectedFace(box=BoundingBox(0.2, 0.1, 0.6, 0.7), embedding=list(embedding), confidence=confidence)


def upload(client, name="party.jpg", content=JPEG, content_type="image/jpeg"):
    return client.post("/api/v1/photos/upload", files={"photo": (name, content, content_type)})


class TestPhotoUpload:
    def test_upload_links_known_guest(self, client, store, detector):
        detector.detect_faces.return_value = [detected(E1)]
        register = client.post(
            "/api/v1/guests/register",
            data={"name": "Alice", "phone": "+1 555 0100"},
            files=[("photos", ("alice.jpg", JPEG, "image/jpeg"))],
        )
        assert register.status_code == 201
        detector.detect_faces.return_value = [detected(at_distance(E1, 0.5)), detected(E2)]

        response = upload(client)

        assert response.status_code == 201
        body = response.json()
        assert body["face_count"] == 2
        assert body["matched_person_ids"] == [register.json()["person_id"]]
        assert body["photo"]["status"] == "COMPLETED"
        assert body["photo"]["width"] == 120

    def test_detection_outage_is_retryable_error(self, client, store, detector):
        detector.detect_faces.side_effect = DetectionServiceError("detector down")

        response = upload(client)

        assert response.status_code == 503
        assert response.json()["detail"] == "Face detection is temporarily unavailable. Please try again."
        assert store.photos == {}
        assert client.get("/api/v1/photos/list").json() == []

    def test_upload_rejects_unsupported_file(self, client):
        response = upload(client, name="notes.txt", content=b"hello", content_type="text/plain")

        assert response.status_code == 400
        assert "Allowed formats" in response.json()["detail"]

    def test_upload_requires_file(self, client):
        assert client.post("/api/v1/photos/upload").status_code == 422


class TestPhotoQueries:
    def test_list_and_faces(self, client, detector):
        detector.detect_faces.return_value = [detected(E1), detected(E2)]
        photo_id = upload(client).json()["photo"]["id"]

        listed = client.get("/api/v1/photos/list")
        faces = client.get(f"/api/v1/photos/{photo_id}/faces")

        assert [photo["id"] for photo in listed.json()] == [photo_id]
        assert faces.status_code == 200
        assert len(faces.json()) == 2
        assert faces.json()[0]["box"] == pytest.approx({"x1": 0.2, "y1": 0.1, "x2": 0.6, "y2": 0.7})
        assert faces.json()[0]["person_id"] is None

    def test_faces_of_unknown_photo(self, client):
        response = client.get("/api/v1/photos/photo-404/faces")
        assert response.status_code == 404
        assert response.json()["detail"] == "Photo not found."

    def test_delete(self, client, store, detector):
        detector.detect_faces.return_value = [detected(E1)]
        photo_id = upload(client).json()["photo"]["id"]

        response = client.delete(f"/api/v1/photos/{photo_id}")

        assert response.status_code == 200
        assert response.json() == {"photo_id": photo_id, "deleted": True}
        assert store.faces == {}
        assert client.delete(f"/api/v1/photos/{photo_id}").status_code == 404


class TestFaceNaming:
    def test_name_propagates(self, client, store, detector):
        detector.detect_faces.return_value = [detected(E1)]
        first = upload(client).json()["photo"]["id"]
        detector.detect_faces.return_value = [detected(at_distance(E1, 0.3))]
        upload(client)
        face_id = client.get(f"/api/v1/photos/{first}/faces").json()[0]["id"]

        response = client.post(f"/api/v1/faces/{face_id}/name", json={"name": "Carol"})

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Carol"
        assert body["propagated_count"] == 1
        assert len(body["face_ids"]) == 2

    def test_empty_name_rejected(self, client):
        assert client.post("/api/v1/faces/face-1/name", json={"name": ""}).status_code == 422
        assert client.post("/api/v1/faces/face-1/name", json={"name": "   "}).status_code == 400

    def test_unknown_face(self, client):
        assert client.post("/api/v1/faces/face-404/name", json={"name": "Carol"}).status_code == 404

    def test_failed_transaction_is_conflict(self, client, store, detector):
        detector.detect_faces.return_value = [detected(E1)]
        photo_id = upload(client).json()["photo"]["id"]
        face_id = client.get(f"/api/v1/photos/{photo_id}/faces").json()[0]["id"]
        store.inject_failure("set_face_person", DatabaseError("write failed"))

        response = client.post(f"/api/v1/faces/{face_id}/name", json={"name": "Carol"})

        assert response.status_code == 409
        assert store.faces[face_id].person_id is None


class TestLiveNotifications:
    def test_viewer_receives_photo_ready(self, client, detector):
        with client.websocket_connect("/api/v1/notifications/ws?channel=photographer") as websocket:
            established = websocket.receive_json()
            assert established["type"] == "connection_established"
            assert established["channel"] == "photographer"

            websocket.send_text("ping")
            assert websocket.receive_text() == "pong"

            photo_id = upload(client).json()["photo"]["id"]
            message = websocket.receive_json()

        assert message["type"] == "photo_ready"
        assert message["photo"]["id"] == photo_id

    def test_viewer_receives_person_renamed_after_naming(self, client, detector):
        detector.detect_faces.return_value = [detected(E1)]
        photo_id = upload(client).json()["photo"]["id"]
        face_id = client.get(f"/api/v1/photos/{photo_id}/faces").json()[0]["id"]

        with client.websocket_connect("/api/v1/notifications/ws?channel=photographer") as websocket:
            websocket.receive_json()
            named = client.post(f"/api/v1/faces/{face_id}/name", json={"name": "Carol"})
            message = websocket.receive_json()

        assert named.status_code == 200
        assert message["type"] == "person_renamed"
        assert message["person"]["name"] == "Carol"
        assert message["face_ids"] == [face_id]

"""
Tests for the upload API router.

Route behaviour is checked against a mocked transfer manager; a final
group drives real uploads through the full application.
"""

import time
from pathlib import Path
from typing import Iterator
from unittest.mock import Mock, patch

import pytest
from fastapi import UploadFile
from fastapi.testclient import TestClient

from resumable_transfer.application.container import Container
from resumable_transfer.core.domain.exceptions import (
    InvalidInput, SeekError, SessionNotFound, TransferConflict
)
from resumable_transfer.core.domain.transfer import TransferStatus
from resumable_transfer.core.interfaces.transfer import ITransferManager
from resumable_transfer.infrastructure.config.models import (
    ApplicationConfig, LoggingConfig, UploadConfig
)
from resumable_transfer.presentation.api.app import create_app


PAYLOAD = bytes(i % 251 for i in range(250))


@pytest.fixture
def config(tmp_path: Path) -> ApplicationConfig:
    return ApplicationConfig(
        upload=UploadConfig(upload_directory=str(tmp_path / "uploads"), chunk_size=100),
        logging=LoggingConfig(console_enabled=False, file_enabled=False)
    )


@pytest.fixture
def manager() -> Mock:
    return Mock(spec=ITransferManager)


@pytest.fixture
def client(config: ApplicationConfig, manager: Mock) -> TestClient:
    container = Container()
    container.register_instance(ApplicationConfig, config)
    container.register_instance(ITransferManager, manager)
    return TestClient(create_app(config, container))


class TestStartUpload:
    """POST /upload"""

    def test_returns_session_id(self, client: TestClient, manager: Mock) -> None:
        manager.start_transfer.return_value = "abc123"

        response = client.post("/upload", files={"file": ("photo.jpg", PAYLOAD)})

        assert response.status_code == 200
        assert response.json() == {"sessionID": "abc123"}

        stream, file_name, size = manager.start_transfer.await_args.args
        assert isinstance(stream, UploadFile)
        assert file_name == "photo.jpg"
        assert size == len(PAYLOAD)

    def test_missing_file(self, client: TestClient, manager: Mock) -> None:
        response = client.post("/upload")

        assert response.status_code == 422
        manager.start_transfer.assert_not_awaited()

    def test_invalid_input(self, client: TestClient, manager: Mock) -> None:
        manager.start_transfer.side_effect = InvalidInput("Failed to get file size")

        response = client.post("/upload", files={"file": ("photo.jpg", PAYLOAD)})

        assert response.status_code == 400
        assert response.json()["detail"] == "Failed to get file size"


class TestPauseUpload:
    """POST /upload/pause"""

    def test_pause(self, client: TestClient, manager: Mock) -> None:
        response = client.post("/upload/pause", params={"sessionID": "abc"})

        assert response.status_code == 200
        assert response.json() == {"message": "Upload paused"}
        manager.pause_transfer.assert_awaited_once_with("abc")

    def test_pause_unknown(self, client: TestClient, manager: Mock) -> None:
        manager.pause_transfer.side_effect = SessionNotFound("abc")

        response = client.post("/upload/pause", params={"sessionID": "abc"})

        assert response.status_code == 404
        assert response.json()["detail"] == "Session not found"

    def test_pause_requires_session_id(self, client: TestClient) -> None:
        assert client.post("/upload/pause").status_code == 422


def make_status(**overrides) -> TransferStatus:
    values = dict(
        token="abc",
        file_name="photo.jpg",
        total_size=len(PAYLOAD),
        uploaded_chunks=1,
        total_chunks=3,
        paused=True,
        completed=False,
        terminated=False,
    )
    values.update(overrides)
    return TransferStatus(**values)


class TestResumeUpload:
    """POST /upload/resume"""

    @pytest.fixture(autouse=True)
    def paused_session(self, manager: Mock) -> None:
        manager.get_status.return_value = make_status()

    def test_resume(self, client: TestClient, manager: Mock) -> None:
        response = client.post("/upload/resume", params={"sessionID": "abc"},
                               files={"file": ("photo.jpg", PAYLOAD)})

        assert response.status_code == 200
        assert response.json() == {"message": "Upload resumed"}

        manager.get_status.assert_awaited_once_with("abc")
        token, stream = manager.resume_transfer.await_args.args
        assert token == "abc"
        assert stream.size == len(PAYLOAD)

    @pytest.mark.parametrize("error,status_code", [
        (SessionNotFound("abc"), 404),
        (TransferConflict("Upload cannot be resumed", "abc"), 409),
        (SeekError("Failed to seek file: offset 200 is past the end", "abc"), 500),
    ])
    def test_resume_errors(self, client: TestClient, manager: Mock,
                           error: Exception, status_code: int) -> None:
        manager.resume_transfer.side_effect = error

        response = client.post("/upload/resume", params={"sessionID": "abc"},
                               files={"file": ("photo.jpg", PAYLOAD)})

        assert response.status_code == status_code

    def test_unknown_session_rejected_before_buffering(
            self, client: TestClient, manager: Mock) -> None:
        manager.get_status.side_effect = SessionNotFound("abc")

        with patch("resumable_transfer.presentation.api.routers.upload.shutil.copyfileobj") as copy:
            response = client.post("/upload/resume", params={"sessionID": "abc"},
                                   files={"file": ("photo.jpg", PAYLOAD)})

        assert response.status_code == 404
        copy.assert_not_called()
        manager.resume_transfer.assert_not_awaited()

    @pytest.mark.parametrize("overrides", [
        dict(paused=False),
        dict(uploaded_chunks=3, completed=True),
        dict(terminated=True),
    ])
    def test_unresumable_session_rejected_before_buffering(
            self, client: TestClient, manager: Mock, overrides: dict) -> None:
        manager.get_status.return_value = make_status(**overrides)

        with patch("resumable_transfer.presentation.api.routers.upload.shutil.copyfileobj") as copy:
            response = client.post("/upload/resume", params={"sessionID": "abc"},
                                   files={"file": ("photo.jpg", PAYLOAD)})

        assert response.status_code == 409
        assert response.json()["detail"] == "Upload cannot be resumed"
        copy.assert_not_called()
        manager.resume_transfer.assert_not_awaited()

    def test_resume_requires_file(self, client: TestClient, manager: Mock) -> None:
        response = client.post("/upload/resume", params={"sessionID": "abc"})

        assert response.status_code == 422
        manager.resume_transfer.assert_not_awaited()


class TestTerminateUpload:
    """POST /upload/terminate"""

    def test_terminate(self, client: TestClient, manager: Mock) -> None:
        response = client.post("/upload/terminate", params={"sessionID": "abc"})

        assert response.status_code == 200
        assert response.json() == {"message": "Upload terminated"}

    def test_terminate_completed(self, client: TestClient, manager: Mock) -> None:
        manager.terminate_transfer.side_effect = TransferConflict("Upload already completed")

        response = client.post("/upload/terminate", params={"sessionID": "abc"})

        assert response.status_code == 409
        assert response.json()["detail"] == "Upload already completed"


class TestUploadStatus:
    """GET /upload/status and /upload/sessions"""

    def _status(self) -> TransferStatus:
        return TransferStatus(
            token="abc", file_name="photo.jpg", total_size=250, uploaded_chunks=2,
            total_chunks=3, paused=True, completed=False, terminated=False
        )

    def test_status(self, client: TestClient, manager: Mock) -> None:
        manager.get_status.return_value = self._status()

        response = client.get("/upload/status", params={"sessionID": "abc"})

        assert response.status_code == 200
        assert response.json() == {
            "sessionID": "abc",
            "fileName": "photo.jpg",
            "totalSize": 250,
            "uploadedChunks": 2,
            "totalChunks": 3,
            "paused": True,
            "completed": False,
            "terminated": False,
            "state": "paused",
            "error": None,
        }

    def test_status_unknown(self, client: TestClient, manager: Mock) -> None:
        manager.get_status.side_effect = SessionNotFound("abc")

        response = client.get("/upload/status", params={"sessionID": "abc"})

        assert response.status_code == 404

    def test_sessions(self, client: TestClient, manager: Mock) -> None:
        manager.list_transfers.return_value = [self._status()]

        response = client.get("/upload/sessions")

        assert response.status_code == 200
        assert [item["sessionID"] for item in response.json()] == ["abc"]


class TestUploadEndToEnd:
    """Real uploads through the full application."""

    @pytest.fixture
    def live_client(self, config: ApplicationConfig) -> Iterator[TestClient]:
        with patch('resumable_transfer.infrastructure.logging.setup.setup_logging'):
            with TestClient(create_app(config)) as test_client:
                yield test_client

    def _wait_for_completion(self, client: TestClient, session_id: str) -> dict:
        deadline = time.monotonic() + 5.0
        while time.monotonic() < deadline:
            data = client.get("/upload/status", params={"sessionID": session_id}).json()
            if data["completed"] and data["state"] == "completed":
                return data
            time.sleep(0.01)
        raise AssertionError(f"upload {session_id} did not complete")

    def test_upload_completes(self, live_client: TestClient, config: ApplicationConfig) -> None:
        response = live_client.post("/upload", files={"file": ("photo.jpg", PAYLOAD)})
        assert response.status_code == 200
        session_id = response.json()["sessionID"]

        data = self._wait_for_completion(live_client, session_id)

        assert data["uploadedChunks"] == 3
        assert data["totalChunks"] == 3
        assert data["totalSize"] == 250
        assert (Path(config.upload.upload_directory) / "photo.jpg").read_bytes() == PAYLOAD

    def test_completed_upload_rejects_resume_and_terminate(self, live_client: TestClient) -> None:
        session_id = live_client.post(
            "/upload", files={"file": ("photo.jpg", PAYLOAD)}).json()["sessionID"]
        self._wait_for_completion(live_client, session_id)

        resume = live_client.post("/upload/resume", params={"sessionID": session_id},
                                  files={"file": ("photo.jpg", PAYLOAD)})
        terminate = live_client.post("/upload/terminate", params={"sessionID": session_id})

        assert resume.status_code == 409
        assert terminate.status_code == 409

    def test_unknown_session(self, live_client: TestClient) -> None:
        for path in ("/upload/pause", "/upload/terminate"):
            assert live_client.post(path, params={"sessionID": "nope"}).status_code == 404
        assert live_client.get("/upload/status", params={"sessionID": "nope"}).status_code == 404

    def test_sessions_listing(self, live_client: TestClient) -> None:
        first = live_client.post("/upload", files={"file": ("a.bin", PAYLOAD)}).json()["sessionID"]
        second = live_client.post("/upload", files={"file": ("b.bin", PAYLOAD)}).json()["sessionID"]
        self._wait_for_completion(live_client, first)
        self._wait_for_completion(live_client, second)

        listed = {item["sessionID"] for item in live_client.get("/upload/sessions").json()}

        assert listed == {first, second}

    def test_finished_upload_releases_file_name(self, live_client: TestClient,
                                                config: ApplicationConfig) -> None:
        first = live_client.post("/upload", files={"file": ("photo.jpg", PAYLOAD)}).json()["sessionID"]
        self._wait_for_completion(live_client, first)

        replacement = PAYLOAD[::-1]
        response = live_client.post("/upload", files={"file": ("photo.jpg", replacement)})
        assert response.status_code == 200
        second = response.json()["sessionID"]
        self._wait_for_completion(live_client, second)

        assert second != first
        assert (Path(config.upload.upload_directory) / "photo.jpg").read_bytes() == replacement

import io
import os
import tempfile
from typing import Callable, Dict, Generator, List, Tuple

# Keep module-level app construction and password hashing cheap and out of the repo
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="outfit-analyzer-"))
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from api.auth import AuthHandler
from api.history import AnalysisHistoryHandler
from app import create_app
from services.blob_store import LocalBlobStore
from services.image_service import ImageService
from services.session_manager import SessionManager

Color = Tuple[int, int, int]


def rgba_pixels(segments: List[Tuple[Color, int]]) -> np.ndarray:
    """Flat RGBA buffer made of consecutive runs of (color, pixel_count)."""
    rows = [np.tile([r, g, b, 255], (count, 1)) for (r, g, b), count in segments]
    return np.concatenate(rows).astype(np.uint8).reshape(-1)


def png_bytes(color: Color, size: Tuple[int, int] = (16, 16), fmt: str = "PNG") -> bytes:
    image = Image.new("RGB", size, color)
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


def split_png_bytes(top: Color, bottom: Color, size: Tuple[int, int] = (16, 16)) -> bytes:
    """Image whose upper half is `top` and lower half is `bottom`."""
    width, height = size
    arr = np.zeros((height, width, 3), dtype=np.uint8)
    arr[: height // 2] = top
    arr[height // 2:] = bottom
    buffer = io.BytesIO()
    Image.fromarray(arr).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def make_pixels() -> Callable[[List[Tuple[Color, int]]], np.ndarray]:
    return rgba_pixels


@pytest.fixture
def make_png() -> Callable[..., bytes]:
    return png_bytes


@pytest.fixture
def make_split_png() -> Callable[..., bytes]:
    return split_png_bytes


@pytest.fixture
def image_service() -> ImageService:
    return ImageService()


@pytest.fixture
def blob_store(tmp_path) -> LocalBlobStore:
    return LocalBlobStore(tmp_path / "uploads", public_prefix="/api/images")


@pytest.fixture
def history_handler(tmp_path) -> AnalysisHistoryHandler:
    return AnalysisHistoryHandler(history_file=tmp_path / "outfit_analyses.json", max_records=5)


@pytest.fixture
def auth_handler(tmp_path) -> AuthHandler:
    return AuthHandler(users_file=tmp_path / "users.json", secret_key="test_secret_key", bcrypt_rounds=4)


@pytest.fixture
def session_manager(auth_handler) -> SessionManager:
    return SessionManager(auth_handler)


@pytest.fixture
def client(tmp_path) -> Generator[TestClient, None, None]:
    """Test client for an app backed by a temporary data directory."""
    with TestClient(create_app(tmp_path / "data")) as test_client:
        yield test_client


@pytest.fixture
def sample_user_data() -> Dict[str, str]:
    return {
        "email": "test@example.com",
        "password": "testpassword123"
    }


@pytest.fixture
def auth_headers(client, sample_user_data) -> Dict[str, str]:
    """Register a user and return bearer headers for it."""
    response = client.post("/api/auth/register", json=sample_user_data)
    assert response.status_code == 200
    token = response.json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
    config.addinivalue_line(
        "markers", "auth: mark test as requiring authentication"
    )

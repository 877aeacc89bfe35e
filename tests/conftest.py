"""Pytest bootstrap configuration.

Set environment variables before any module that reads application settings
is imported (``main`` builds its app at import time).
"""
import os
import tempfile

os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="imagedrop-tests-"))
os.environ.setdefault("UPLOAD_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient

from core.config import Settings


SECRET = "test-secret"


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def settings(upload_dir):
    return Settings(
        _env_file=None,
        UPLOAD_DIR=str(upload_dir),
        UPLOAD_SECRET=SECRET,
        MAX_FILE_SIZE="1KB",
        PUBLIC_HOST="http://files.test/",
    )


@pytest.fixture
def upload_config(settings):
    config = settings.upload_config()
    config.ensure_upload_dir()
    return config


@pytest.fixture
def client(settings):
    from main import create_app

    # Context manager so the lifespan creates the storage provider
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    return {"x-upload-secret": SECRET}

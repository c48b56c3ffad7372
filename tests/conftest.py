"""
Shared fixtures for the fitting canvas and cart service tests.

Provides a controllable clock, app settings and an app client.
"""
import pytest
from fastapi.testclient import TestClient

from main import create_app
from tests.helpers import FakeClock
from utils.settings import AppSettings


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings(tmp_path):
    return AppSettings(
        canvas_width=200,
        canvas_height=200,
        canvas_device_pixel_ratio=1.0,
        public_dir=tmp_path / "public",
    )


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client

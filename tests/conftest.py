# tests/conftest.py
"""
Test configuration and shared fixtures.

Provides a Flask app backed by a small on-disk strain catalog, plus the test
client and CLI runner.
"""

import json
import os
import sys
from io import BytesIO

import pytest

# Add the project root to sys.path
PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


SAMPLE_STRAINS = [
    {
        "name": "Blue Dream",
        "type": "Hybrid",
        "effects": {"relaxed": "56%", "happy": "52%"},
        "flavors": ["Blueberry", "Sweet"],
        "description": "A sativa-dominant hybrid crossing Blueberry with Haze.",
    },
    {
        "name": "OG Kush",
        "type": "Hybrid",
        "effects": {"relaxed": "61%"},
        "flavors": ["Earthy", "Pine"],
        "description": "Complex aroma of fuel and skunk with a heavy body high.",
    },
    {
        "name": "Sour Diesel",
        "type": "Sativa",
        "effects": {"energetic": "58%"},
        "flavors": ["Diesel", "Pungent"],
        "description": "Energizing daytime strain.",
    },
    {
        "name": "Granddaddy Purple",
        "type": "Indica",
        "effects": {"sleepy": "55%"},
        "flavors": ["Grape", "Berry"],
        "description": "Purple Urkle and Big Bud cross.",
    },
    {"name": "No Details"},
    # Entries below are dropped by the loader
    {"type": "Indica", "flavors": ["Berry"]},
    {"name": 42, "type": "Sativa"},
    "not a record",
]

VALID_SAMPLE_COUNT = 5


@pytest.fixture
def strain_file(tmp_path):
    """Write SAMPLE_STRAINS to a temporary JSON file and return its path."""
    path = tmp_path / "strains.json"
    path.write_text(json.dumps(SAMPLE_STRAINS), encoding="utf-8")
    return str(path)


@pytest.fixture
def app(strain_file):
    """Create and configure a Flask app instance for testing."""
    os.environ["APP_CONFIG"] = "strain_scanner.config.TestConfig"

    from strain_scanner import create_app
    from strain_scanner.services import catalog

    app = create_app()
    app.config.update({
        "TESTING": True,
        "WTF_CSRF_ENABLED": False,  # Disable CSRF for tests
        "RATELIMIT_ENABLED": False,
        "STRAIN_DATA_PATH": strain_file,
    })
    catalog.init_catalog(app)

    yield app


@pytest.fixture
def client(app):
    """Create a test client for the Flask app."""
    return app.test_client()


@pytest.fixture
def runner(app):
    """Create a test CLI runner for the Flask app."""
    return app.test_cli_runner()


@pytest.fixture
def png_bytes():
    """A small valid PNG image."""
    from PIL import Image

    img = Image.new("RGB", (800, 600), color="green")
    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()

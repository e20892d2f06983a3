import os, sys
import pytest
from fastapi.testclient import TestClient

# Ensure app import path
# put backend/ first on sys.path so the local app package wins
backend_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if backend_root not in sys.path:
    sys.path.insert(0, backend_root)

from app.main import app  # noqa: E402
from app.db.session import engine, Base  # noqa: E402


@pytest.fixture(scope="function")  # fresh DB per test
def client():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    return TestClient(app)

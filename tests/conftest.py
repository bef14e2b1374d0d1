import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure project root is on sys.path so 'kaisan_console' is importable during tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("SUPABASE_DISABLED", "1")
os.environ.setdefault("WEBHOOKS_DISABLED", "1")
os.environ.setdefault("ENV", "test")


@pytest.fixture(autouse=True)
def clean_state(monkeypatch):
    # lazy import after env configured
    from kaisan_console.infrastructure.api.dependencies import get_workspaces
    from kaisan_console.infrastructure.database import supabase_client
    from kaisan_console.infrastructure.database.repositories import (
        knowledge_repository,
        profile_repository,
        system_prompt_repository,
    )
    from kaisan_console.infrastructure.notifications import webhook_notifier

    monkeypatch.delenv("KB_WEBHOOK_MODE", raising=False)
    monkeypatch.delenv("DEFAULT_COUNTRY_CODE", raising=False)
    yield
    supabase_client.reset_memory_auth()
    profile_repository._MEM_PROFILES.clear()
    knowledge_repository._MEM_ENTRIES.clear()
    system_prompt_repository._MEM_PROMPTS.clear()
    webhook_notifier._MEM_SENT.clear()
    get_workspaces().clear()


@pytest.fixture()
def client():
    from kaisan_console.main import create_app

    app = create_app()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_header() -> dict[str, str]:
    # any token is accepted in disabled mode
    return {"Authorization": "Bearer test-token"}


@pytest.fixture()
def signed_in(client):
    """Register and sign in a user; the session cookies stay on ``client``."""
    creds = {"email": "ana@kaisan.ai", "password": "segredo123"}
    assert client.post("/auth/signup", json=creds).status_code == 201
    r = client.post("/auth/login", json=creds)
    assert r.status_code == 200, r.text
    return r.json()


@pytest.fixture()
def sent_webhooks():
    from kaisan_console.infrastructure.notifications.webhook_notifier import _MEM_SENT

    return _MEM_SENT

from unittest.mock import MagicMock

import httpx
import pytest

from kaisan_console.application import messages
from kaisan_console.infrastructure.api.dependencies import (
    get_knowledge_repo,
    get_notifier,
    get_profile_repo,
    get_prompt_repo,
)
from kaisan_console.infrastructure.database.repositories import profile_repository
from kaisan_console.infrastructure.notifications.webhook_notifier import (
    RESET_MEMORY_WEBHOOK_URL,
    WebhookNotifier,
)

GUARDED_PAGES = ["/whatsapp", "/prompt", "/base-de-conhecimento", "/reset-memory", "/profile", "/navigation"]


def _provide(value):
    return lambda: value


@pytest.mark.parametrize("route", GUARDED_PAGES)
def test_guarded_page_redirects_without_session(client, route):
    repos = {dep: MagicMock() for dep in (get_knowledge_repo, get_profile_repo, get_prompt_repo)}
    for dep, repo in repos.items():
        client.app.dependency_overrides[dep] = _provide(repo)
    r = client.get(route, follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/"
    for repo in repos.values():
        assert repo.method_calls == []


def test_guarded_post_redirects_without_session(client):
    r = client.post("/prompt", json={"prompt": "Olá"}, follow_redirects=False)
    assert r.status_code == 303


def test_navigation_bar(client, auth_header):
    r = client.get("/reset-memory", headers=auth_header)
    nav = r.json()["nav"]
    assert [item["href"] for item in nav] == [
        "/whatsapp",
        "/prompt",
        "/base-de-conhecimento",
        "/reset-memory",
        "/profile",
    ]
    assert [item["href"] for item in nav if item["active"]] == ["/reset-memory"]


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_prompt_create_then_update_in_place(client, auth_header):
    r = client.get("/prompt", headers=auth_header)
    assert r.status_code == 200
    assert r.json()["prompt"] == ""
    assert r.json()["prompt_id"] is None

    r1 = client.post("/prompt", headers=auth_header, json={"prompt": "Você é a Kaisan."})
    assert r1.status_code == 200, r1.text
    assert r1.json()["message"]["text"] == messages.PROMPT_ADDED
    prompt_id = r1.json()["prompt_id"]
    assert prompt_id

    r2 = client.post("/prompt", headers=auth_header, json={"prompt": "Seja breve.", "id": prompt_id})
    assert r2.json()["message"]["text"] == messages.PROMPT_UPDATED
    assert r2.json()["prompt_id"] == prompt_id

    r3 = client.get("/prompt", headers=auth_header)
    assert r3.json()["prompt"] == "Seja breve."
    assert r3.json()["prompt_id"] == prompt_id


def test_prompt_blank_is_rejected(client, auth_header):
    r = client.post("/prompt", headers=auth_header, json={"prompt": "  "})
    assert r.status_code == 400
    assert r.json()["detail"] == messages.FILL_PROMPT
    assert client.get("/prompt", headers=auth_header).json()["prompt_id"] is None


def test_profile_created_on_first_visit_and_updated(client, auth_header):
    r = client.get("/profile", headers=auth_header)
    assert r.status_code == 200
    assert r.json()["full_name"] == ""
    assert len(profile_repository._MEM_PROFILES) == 1

    body = {"full_name": "Maria Silva", "birth_date": "", "phone": "21999990000", "address": ""}
    r2 = client.post("/profile", headers=auth_header, json=body)
    assert r2.status_code == 200, r2.text
    data = r2.json()
    assert data["message"]["text"] == messages.PROFILE_UPDATED
    assert data["full_name"] == "Maria Silva"
    assert data["birth_date"] is None
    row = next(iter(profile_repository._MEM_PROFILES.values()))
    assert row["address"] is None
    assert row["updated_at"] is not None

    r3 = client.post("/profile", headers=auth_header, json={**body, "birth_date": "1990-05-17"})
    assert r3.json()["birth_date"] == "1990-05-17"


def test_whatsapp_without_profile_shows_support_message(client, auth_header):
    r = client.get("/whatsapp", headers=auth_header)
    assert r.status_code == 200
    data = r.json()
    assert data["profile_found"] is False
    assert data["message"]["text"] == messages.PROFILE_NOT_FOUND
    assert profile_repository._MEM_PROFILES == {}

    r2 = client.post("/whatsapp", headers=auth_header, json={"area_code": "21", "number": "98765-4321"})
    assert r2.status_code == 404


def test_whatsapp_save_and_display(client, auth_header):
    client.get("/profile", headers=auth_header)
    r = client.post("/whatsapp", headers=auth_header, json={"area_code": "21", "number": "98765-4321"})
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["message"]["text"] == messages.WHATSAPP_SAVED
    assert (data["country_code"], data["area_code"], data["number"]) == ("55", "21", "98765-4321")
    row = next(iter(profile_repository._MEM_PROFILES.values()))
    assert row["wa_number"] == "5521987654321"

    r2 = client.get("/whatsapp", headers=auth_header)
    assert r2.json()["number"] == "98765-4321"


def test_whatsapp_requires_fields(client, auth_header):
    client.get("/profile", headers=auth_header)
    r = client.post("/whatsapp", headers=auth_header, json={"area_code": "", "number": "98765-4321"})
    assert r.status_code == 400
    assert r.json()["detail"] == messages.FILL_ALL_FIELDS


def test_reset_memory_page_defaults(client, auth_header, monkeypatch):
    assert client.get("/reset-memory", headers=auth_header).json()["country_code"] == "55"
    monkeypatch.setenv("DEFAULT_COUNTRY_CODE", "351")
    assert client.get("/reset-memory", headers=auth_header).json()["country_code"] == "351"


def test_reset_memory_sends_phone(client, auth_header, sent_webhooks):
    body = {"area_code": "21", "phone_number": "982280802"}
    r = client.post("/reset-memory", headers=auth_header, json=body)
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["message"]["text"] == messages.RESET_MEMORY_SENT
    assert data["phone_number"] == ""
    assert sent_webhooks == [{"url": RESET_MEMORY_WEBHOOK_URL, "payload": {"phone": "5521982280802"}}]


def test_reset_memory_requires_fields(client, auth_header, sent_webhooks):
    r = client.post("/reset-memory", headers=auth_header, json={"area_code": "21", "phone_number": ""})
    assert r.status_code == 400
    assert r.json()["detail"] == messages.FILL_ALL_PHONE_FIELDS
    assert sent_webhooks == []


def test_reset_memory_webhook_failure(client, auth_header):
    failing = WebhookNotifier(transport=httpx.MockTransport(lambda request: httpx.Response(500)))
    client.app.dependency_overrides[get_notifier] = lambda: failing
    r = client.post("/reset-memory", headers=auth_header, json={"area_code": "21", "phone_number": "982280802"})
    assert r.status_code == 502
    assert r.json()["message"] == {"text": messages.RESET_MEMORY_FAILED, "type": "error"}


def test_reset_memory_returns_country_code_sent(client, auth_header, sent_webhooks):
    body = {"country_code": "+1 ", "area_code": "21", "phone_number": "982280802"}
    r = client.post("/reset-memory", headers=auth_header, json=body)
    assert r.status_code == 200, r.text
    assert r.json()["country_code"] == "1"
    assert sent_webhooks[-1]["payload"] == {"phone": "121982280802"}

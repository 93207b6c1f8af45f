# tests/test_app.py
"""
Integration tests for the ShardFlags Flask application.

They build the real app with ``create_app`` and drive it through Flask's
test client:
- upload a configuration snapshot through the admin API,
- evaluate flags and bandit actions through the public routes,
- check that errors come back as JSON with the right status codes.
"""


import json

import pytest

from shardflags.app import create_app
from shardflags.config import Settings


ADMIN_KEY = "secret-admin-key"


@pytest.fixture
def app(recording_logger):
    return create_app(
        Settings(admin_api_key=ADMIN_KEY), assignment_logger=recording_logger
    )


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def loaded_client(client, flags_payload, bandits_payload):
    resp = client.put(
        "/admin/configuration/",
        json={"flags": flags_payload, "bandits": bandits_payload},
        headers={"X-Api-Key": ADMIN_KEY, "X-Config-Version": "etag-1"},
    )
    assert resp.status_code == 200
    return client


# ---------- Health ----------


def test_health_reports_loaded_flags(client, flags_payload):
    resp = client.get("/health/")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "flags_loaded": 0}

    client.put(
        "/admin/configuration/",
        json={"flags": flags_payload},
        headers={"X-Api-Key": ADMIN_KEY},
    )
    resp = client.get("/health/")
    assert resp.get_json()["flags_loaded"] == len(flags_payload["flags"])


def test_configuration_files_are_loaded_at_startup(
    tmp_path, flags_payload, bandits_payload, recording_logger
):
    flags_file = tmp_path / "flags.json"
    bandits_file = tmp_path / "bandits.json"
    flags_file.write_text(json.dumps(flags_payload), encoding="utf-8")
    bandits_file.write_text(json.dumps(bandits_payload), encoding="utf-8")

    app = create_app(
        Settings(
            flags_config_path=str(flags_file),
            bandits_config_path=str(bandits_file),
        ),
        assignment_logger=recording_logger,
    )
    with app.test_client() as c:
        resp = c.get("/health/")
    assert resp.get_json()["flags_loaded"] == len(flags_payload["flags"])


# ---------- Admin ----------


def test_admin_requires_api_key(client, flags_payload):
    resp = client.put("/admin/configuration/", json={"flags": flags_payload})
    assert resp.status_code == 401
    assert resp.get_json()["code"] == "auth.api_key_invalid"

    resp = client.get(
        "/admin/configuration/", headers={"X-Api-Key": "wrong-key"}
    )
    assert resp.status_code == 401


def test_upload_returns_snapshot_summary(client, flags_payload, bandits_payload):
    resp = client.put(
        "/admin/configuration/",
        json={"flags": flags_payload, "bandits": bandits_payload},
        headers={"X-Api-Key": ADMIN_KEY, "X-Config-Version": "etag-1"},
    )

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["flag_config_version"] == "etag-1"
    assert data["flags"] == sorted(flags_payload["flags"])
    assert data["bandits"] == ["banner_bandit"]
    assert data["bandit_model_versions"] == ["v123"]

    resp = client.get("/admin/configuration/", headers={"X-Api-Key": ADMIN_KEY})
    assert resp.get_json() == data


def test_upload_without_key_configured_is_open(recording_logger, flags_payload):
    app = create_app(Settings(), assignment_logger=recording_logger)
    with app.test_client() as c:
        resp = c.put("/admin/configuration/", json={"flags": flags_payload})
    assert resp.status_code == 200


def test_upload_rejects_bad_envelope(client):
    resp = client.put(
        "/admin/configuration/",
        json={"bandits": {}},
        headers={"X-Api-Key": ADMIN_KEY},
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "BadRequest"


def test_upload_rejects_invalid_flags_document(client, flags_payload):
    flags_payload["flags"]["kill-switch"]["enabled"] = "yes"

    resp = client.put(
        "/admin/configuration/",
        json={"flags": flags_payload},
        headers={"X-Api-Key": ADMIN_KEY},
    )

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "InvalidConfiguration"


def test_failed_upload_keeps_previous_snapshot(loaded_client):
    loaded_client.put(
        "/admin/configuration/",
        json={"flags": {"flags": {"x": {"key": "x"}}}},
        headers={"X-Api-Key": ADMIN_KEY},
    )

    resp = loaded_client.get(
        "/admin/configuration/", headers={"X-Api-Key": ADMIN_KEY}
    )
    assert resp.get_json()["flag_config_version"] == "etag-1"


# ---------- Evaluate ----------


def test_evaluate_assigned(loaded_client, recording_logger):
    resp = loaded_client.post(
        "/evaluate/",
        json={
            "flag_key": "kill-switch",
            "subject_key": "u1",
            "subject_attributes": {"email": "dev@example.com"},
        },
    )

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["assigned"] is True
    assert data["variation_key"] == "on"
    assert data["variation_value"] is True
    assert data["allocation_key"] == "internal-users"
    assert len(recording_logger.assignments) == 1


def test_evaluate_split_returns_extra_logging(loaded_client):
    resp = loaded_client.post(
        "/evaluate/", json={"flag_key": "split-flag", "subject_key": "erin"}
    )

    data = resp.get_json()
    assert data["variation_value"] == "treatment"
    assert data["extra_logging"] == {"holdout": "h1"}


def test_evaluate_unknown_flag_is_not_assigned(loaded_client):
    resp = loaded_client.post(
        "/evaluate/", json={"flag_key": "nope", "subject_key": "u1"}
    )

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["assigned"] is False
    assert data["variation_key"] is None


@pytest.mark.parametrize(
    "payload",
    [
        {"subject_key": "u1"},
        {"flag_key": "kill-switch", "subject_key": 12},
        {"flag_key": "kill-switch", "subject_key": "u1", "extra": True},
    ],
)
def test_evaluate_rejects_invalid_payload(loaded_client, payload):
    resp = loaded_client.post("/evaluate/", json=payload)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "BadRequest"


def test_evaluate_rejects_non_json_body(loaded_client):
    resp = loaded_client.post(
        "/evaluate/", data="not json", content_type="text/plain"
    )
    assert resp.status_code == 400
    assert resp.get_json()["detail"] == "Payload must be a JSON object."


def test_evaluate_rejects_blank_subject(loaded_client):
    resp = loaded_client.post(
        "/evaluate/", json={"flag_key": "kill-switch", "subject_key": "  "}
    )
    assert resp.status_code == 400


def test_evaluate_broken_configuration_is_500(loaded_client):
    resp = loaded_client.post(
        "/evaluate/", json={"flag_key": "broken-flag", "subject_key": "u1"}
    )
    assert resp.status_code == 500
    assert resp.get_json()["error"] == "ConfigurationIntegrityError"


# ---------- Bandits ----------


def test_bandit_action(loaded_client, recording_logger):
    resp = loaded_client.post(
        "/bandits/action",
        json={
            "flag_key": "banner_bandit_flag",
            "subject_key": "alice",
            "subject_attributes": {"age": 30, "country": "US"},
            "actions": {
                "nike": {"brandAffinity": 0.5},
                "adidas": {"loyalty_tier": "gold"},
            },
            "default": "control",
        },
    )

    assert resp.status_code == 200
    assert resp.get_json() == {"variation": "banner_bandit", "action": "nike"}
    assert len(recording_logger.bandit_actions) == 1


def test_bandit_action_with_action_keys(loaded_client):
    resp = loaded_client.post(
        "/bandits/action",
        json={
            "flag_key": "banner_bandit_flag",
            "subject_key": "alice",
            "actions": ["adidas"],
            "default": "control",
        },
    )
    assert resp.get_json() == {"variation": "banner_bandit", "action": "adidas"}


def test_bandit_action_rejects_unsupported_attributes(loaded_client):
    resp = loaded_client.post(
        "/bandits/action",
        json={
            "flag_key": "banner_bandit_flag",
            "subject_key": "alice",
            "subject_attributes": {"tags": ["a"]},
            "actions": ["adidas"],
            "default": "control",
        },
    )
    assert resp.status_code == 400


def test_bandit_action_requires_default(loaded_client):
    resp = loaded_client.post(
        "/bandits/action",
        json={
            "flag_key": "banner_bandit_flag",
            "subject_key": "alice",
            "actions": ["adidas"],
        },
    )
    assert resp.status_code == 400


# ---------- Errors ----------


def test_unknown_route_returns_json_404(client):
    resp = client.get("/does-not-exist")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "Not Found"

import json
from pathlib import Path

import pytest

from trustgate.config import (
    DEFAULT_TRUST_STORE_PATH,
    Settings,
    TrustedEntitiesOptions,
    load_settings,
    settings_from_dict,
)
from trustgate.models import DependencyEcosystem


def test_defaults():
    settings = Settings()

    assert settings.github.api_url == "https://api.github.com"
    assert settings.webhook.deploy is False
    assert settings.holidays.region == "england-and-wales"
    assert settings.trust_store_path == DEFAULT_TRUST_STORE_PATH
    assert settings.http_timeout == 10.0


def test_settings_from_dict():
    settings = settings_from_dict(
        {
            "github": {"app_id": "1234", "installation_id": 42},
            "webhook": {
                "deploy": True,
                "trusted_entities": {
                    "dependencies": ["^Microsoft\\."],
                    "publishers": {"github-actions": ["actions"], "NuGet": ["dotnetfoundation"]},
                },
            },
            "google": {"calendar_ids": ["me@example.com"]},
            "holidays": {"region": "scotland"},
            "trust_store_path": "/tmp/trust.db",
            "http_timeout": 5,
        }
    )

    assert settings.github.app_id == "1234"
    assert settings.github.installation_id == 42
    assert settings.webhook.deploy is True
    assert settings.webhook.trusted_entities.dependencies == ["^Microsoft\\."]
    assert settings.webhook.trusted_entities.publishers == {
        DependencyEcosystem.GITHUB_ACTIONS: ["actions"],
        DependencyEcosystem.NUGET: ["dotnetfoundation"],
    }
    assert settings.google.calendar_ids == ["me@example.com"]
    assert settings.holidays.region == "scotland"
    assert settings.trust_store_path == Path("/tmp/trust.db")
    assert settings.http_timeout == 5.0


def test_unknown_publisher_ecosystem():
    with pytest.raises(ValueError, match="cargo"):
        settings_from_dict({"webhook": {"trusted_entities": {"publishers": {"cargo": ["me"]}}}})


def test_unknown_setting():
    with pytest.raises(TypeError):
        settings_from_dict({"github": {"app_secret": "nope"}})


def test_load_settings(tmp_path):
    path = tmp_path / "trustgate.json"
    path.write_text(json.dumps({"webhook": {"deploy": True}}), encoding="utf-8")

    assert load_settings(path).webhook.deploy is True


def test_load_settings_missing_file(tmp_path):
    assert load_settings(tmp_path / "missing.json") == Settings()
    assert load_settings(None) == Settings()


def test_trusted_users_are_ignored():
    settings = settings_from_dict({"webhook": {"trusted_entities": {"users": ["dependabot[bot]"]}}})

    assert settings.webhook.trusted_entities == TrustedEntitiesOptions()

"""Configuration for trustgate.

Settings are plain dataclasses loaded from a JSON file. Secrets such as the
GitHub App private key are usually supplied through environment variables
by the CLI instead of being written to the file.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from trustgate.models import DependencyEcosystem

DEFAULT_TRUST_STORE_PATH = Path.home() / ".local" / "share" / "trustgate" / "trust.db"


@dataclass
class GitHubOptions:
    """GitHub App and API settings."""

    app_id: str = ""
    private_key: str = ""  # PEM
    installation_id: Optional[int] = None
    access_token: str = ""
    api_url: str = "https://api.github.com"
    graphql_url: str = "https://api.github.com/graphql"


@dataclass
class TrustedEntitiesOptions:
    """Identities that are trusted without operator approval.

    Attributes:
        dependencies: Regular expressions matched against dependency ids.
        publishers: Trusted owners per ecosystem.
    """

    dependencies: list[str] = field(default_factory=list)
    publishers: dict[DependencyEcosystem, list[str]] = field(default_factory=dict)


@dataclass
class WebhookOptions:
    """Feature switches for acting on webhooks."""

    deploy: bool = False
    approve: bool = False
    automerge: bool = False
    trusted_entities: TrustedEntitiesOptions = field(default_factory=TrustedEntitiesOptions)


@dataclass
class GoogleOptions:
    """Google Calendar settings used by the calendar deployment rule."""

    calendar_ids: list[str] = field(default_factory=list)
    access_token: str = ""


@dataclass
class HolidayOptions:
    region: str = "england-and-wales"


@dataclass
class Settings:
    """All settings consumed by the trust and deployment engine."""

    github: GitHubOptions = field(default_factory=GitHubOptions)
    webhook: WebhookOptions = field(default_factory=WebhookOptions)
    google: GoogleOptions = field(default_factory=GoogleOptions)
    holidays: HolidayOptions = field(default_factory=HolidayOptions)
    trust_store_path: Path = DEFAULT_TRUST_STORE_PATH
    http_timeout: float = 10.0


def _parse_trusted_entities(data: dict[str, Any]) -> TrustedEntitiesOptions:
    publishers = {
        DependencyEcosystem.parse(name): list(owners)
        for name, owners in (data.get("publishers") or {}).items()
    }
    return TrustedEntitiesOptions(
        dependencies=list(data.get("dependencies") or []),
        publishers=publishers,
    )


def settings_from_dict(data: dict[str, Any]) -> Settings:
    """Build Settings from a parsed JSON document.

    Args:
        data: Dictionary with optional "github", "webhook", "google",
            "holidays", "trust_store_path" and "http_timeout" keys.

    Returns:
        The parsed Settings.

    Raises:
        ValueError: If a publisher ecosystem is unknown.
        TypeError: If a section contains unknown keys.
    """
    webhook_data = dict(data.get("webhook") or {})
    trusted = _parse_trusted_entities(webhook_data.pop("trusted_entities", None) or {})

    settings = Settings(
        github=GitHubOptions(**(data.get("github") or {})),
        webhook=WebhookOptions(trusted_entities=trusted, **webhook_data),
        google=GoogleOptions(**(data.get("google") or {})),
        holidays=HolidayOptions(**(data.get("holidays") or {})),
    )

    if data.get("trust_store_path"):
        settings.trust_store_path = Path(data["trust_store_path"]).expanduser()
    if data.get("http_timeout") is not None:
        settings.http_timeout = float(data["http_timeout"])

    return settings


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from a JSON file.

    Args:
        path: Path to the settings file. If None or missing, defaults are used.

    Returns:
        The loaded Settings.
    """
    if path is None or not path.exists():
        return Settings()

    with open(path, encoding="utf-8") as f:
        return settings_from_dict(json.load(f))

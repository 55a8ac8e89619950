import pytest

from trustgate.models import (
    AuthenticationScheme,
    Credentials,
    DependencyEcosystem,
    RepositoryId,
    WebhookEvent,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("npm", DependencyEcosystem.NPM),
        ("github-actions", DependencyEcosystem.GITHUB_ACTIONS),
        ("GITHUB_ACTIONS", DependencyEcosystem.GITHUB_ACTIONS),
        ("NuGet", DependencyEcosystem.NUGET),
        (" submodules ", DependencyEcosystem.SUBMODULES),
    ],
)
def test_ecosystem_parse(value, expected):
    assert DependencyEcosystem.parse(value) is expected


def test_ecosystem_parse_unknown():
    with pytest.raises(ValueError, match="Unknown dependency ecosystem"):
        DependencyEcosystem.parse("cargo")


def test_repository_id_parse():
    repository = RepositoryId.parse("octo-org/octo-app")

    assert repository.owner == "octo-org"
    assert repository.name == "octo-app"
    assert repository.full_name == "octo-org/octo-app"
    assert str(repository) == "octo-org/octo-app"


@pytest.mark.parametrize("slug", ["octo-org", "octo-org/", "/octo-app", "a/b/c"])
def test_repository_id_parse_invalid(slug):
    with pytest.raises(ValueError):
        RepositoryId.parse(slug)


def test_credentials_authorization_header():
    assert Credentials("jwt", AuthenticationScheme.BEARER).authorization_header == "Bearer jwt"
    assert Credentials("ghs_token").authorization_header == "token ghs_token"
    assert Credentials.anonymous().authorization_header is None


def test_credentials_repr_hides_token():
    """Test that tokens never appear in logs through repr()."""
    assert "secret" not in repr(Credentials("secret"))


def test_webhook_event_deployment_protection_rule_requested():
    assert WebhookEvent("deployment_protection_rule", "requested").is_deployment_protection_rule_requested
    assert not WebhookEvent("deployment_protection_rule", "completed").is_deployment_protection_rule_requested
    assert not WebhookEvent("check_suite", "requested").is_deployment_protection_rule_requested

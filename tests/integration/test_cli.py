import json

import pytest
from typer.testing import CliRunner

from trustgate.cli import app
from trustgate.evaluator import REASON_PUBLISHER, TrustDecision
from trustgate.models import DependencyEcosystem, PackageReference, RepositoryId, RuleVerdict

runner = CliRunner()


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "trust.db"


@pytest.fixture
def mock_run_check(mocker):
    """Mock the _run_check function."""
    decision = TrustDecision(
        reference=PackageReference(DependencyEcosystem.NUGET, "Newtonsoft.Json", "13.0.1"),
        trusted=True,
        reason=REASON_PUBLISHER,
        owners=["dotnetfoundation", "jamesnk"],
    )
    return mocker.patch("trustgate.cli._run_check", return_value=decision)


class TestCheck:
    def test_trusted(self, store_path, mock_run_check):
        result = runner.invoke(
            app,
            [
                "check",
                "NuGet",
                "Newtonsoft.Json",
                "13.0.1",
                "--repository",
                "octo-org/octo-app",
                "--trust-store",
                str(store_path),
            ],
        )

        assert result.exit_code == 0
        assert "Owners: dotnetfoundation, jamesnk" in result.stdout
        assert "Trusted: Newtonsoft.Json@13.0.1 (publisher)" in result.stdout

        settings, repository, reference = mock_run_check.call_args.args
        assert repository == RepositoryId("octo-org", "octo-app")
        assert reference == PackageReference(DependencyEcosystem.NUGET, "Newtonsoft.Json", "13.0.1")
        assert settings.trust_store_path == store_path

    def test_not_trusted(self, store_path, mocker):
        mocker.patch(
            "trustgate.cli._run_check",
            return_value=TrustDecision(
                reference=PackageReference(DependencyEcosystem.PIP, "sampleproject", "4.0.0"),
                trusted=False,
                attestation=False,
            ),
        )

        result = runner.invoke(
            app,
            ["check", "pip", "sampleproject", "4.0.0", "-r", "octo-org/octo-app", "--trust-store", str(store_path)],
        )

        assert result.exit_code == 1
        assert "Attestation: invalid" in result.stdout
        assert "Not trusted: sampleproject@4.0.0" in result.stdout

    def test_github_options_override_config(self, tmp_path, store_path, mock_run_check):
        config = tmp_path / "trustgate.json"
        config.write_text(
            json.dumps({"github": {"app_id": "1"}, "webhook": {"trusted_entities": {"publishers": {"nuget": ["jamesnk"]}}}}),
            encoding="utf-8",
        )

        result = runner.invoke(
            app,
            [
                "check",
                "nuget",
                "Newtonsoft.Json",
                "13.0.1",
                "-r",
                "octo-org/octo-app",
                "--config",
                str(config),
                "--trust-store",
                str(store_path),
                "--github-token",
                "ghp_example",
                "--app-id",
                "12345",
            ],
        )

        assert result.exit_code == 0
        settings = mock_run_check.call_args.args[0]
        assert settings.github.access_token == "ghp_example"
        assert settings.github.app_id == "12345"
        assert settings.webhook.trusted_entities.publishers == {DependencyEcosystem.NUGET: ["jamesnk"]}

    def test_invalid_repository(self, store_path, mock_run_check):
        result = runner.invoke(
            app,
            ["check", "npm", "react", "18.2.0", "-r", "octo-app", "--trust-store", str(store_path)],
        )

        assert result.exit_code == 1
        mock_run_check.assert_not_called()

    def test_error(self, store_path, mocker):
        mocker.patch("trustgate.cli._run_check", side_effect=RuntimeError("registry unavailable"))

        result = runner.invoke(
            app,
            ["check", "npm", "react", "18.2.0", "-r", "octo-org/octo-app", "--trust-store", str(store_path)],
        )

        assert result.exit_code == 1

    def test_invalid_config(self, tmp_path, store_path, mock_run_check):
        config = tmp_path / "trustgate.json"
        config.write_text("{not json", encoding="utf-8")

        result = runner.invoke(
            app,
            ["check", "npm", "react", "18.2.0", "-r", "octo-org/octo-app", "-c", str(config)],
        )

        assert result.exit_code == 1
        mock_run_check.assert_not_called()


class TestTrustStore:
    def test_trust_and_list(self, store_path):
        result = runner.invoke(app, ["trust", "npm", "react", "18.2.0", "--trust-store", str(store_path)])

        assert result.exit_code == 0
        assert "Trusted: npm react@18.2.0" in result.stdout

        result = runner.invoke(app, ["list", "npm", "--trust-store", str(store_path)])

        assert result.exit_code == 0
        assert "Trusted npm dependencies" in result.stdout
        assert "react" in result.stdout
        assert "18.2.0" in result.stdout

    def test_list_empty(self, store_path):
        result = runner.invoke(app, ["list", "ruby", "--trust-store", str(store_path)])

        assert result.exit_code == 0
        assert "No trusted ruby dependencies" in result.stdout

    def test_distrust(self, store_path):
        runner.invoke(app, ["trust", "ruby", "rails", "7.1.0", "--trust-store", str(store_path)])

        result = runner.invoke(app, ["distrust", "ruby", "rails", "7.1.0", "--trust-store", str(store_path)])

        assert result.exit_code == 0
        assert "Distrusted: ruby rails@7.1.0" in result.stdout
        assert "No trusted ruby dependencies" in runner.invoke(
            app, ["list", "ruby", "--trust-store", str(store_path)]
        ).stdout

    def test_distrust_all(self, store_path):
        runner.invoke(app, ["trust", "npm", "react", "18.2.0", "--trust-store", str(store_path)])
        runner.invoke(app, ["trust", "pip", "requests", "2.31.0", "--trust-store", str(store_path)])

        result = runner.invoke(app, ["distrust-all", "--yes", "--trust-store", str(store_path)])

        assert result.exit_code == 0
        assert "Distrusted 2 dependencies" in result.stdout

    def test_distrust_all_declined(self, store_path):
        runner.invoke(app, ["trust", "npm", "react", "18.2.0", "--trust-store", str(store_path)])

        result = runner.invoke(app, ["distrust-all", "--trust-store", str(store_path)], input="n\n")

        assert result.exit_code == 1
        assert "react" in runner.invoke(app, ["list", "npm", "--trust-store", str(store_path)]).stdout

    def test_unknown_ecosystem(self, store_path):
        result = runner.invoke(app, ["trust", "cargo", "serde", "1.0.0", "--trust-store", str(store_path)])

        assert result.exit_code == 2


def test_report(tmp_path, store_path):
    output_file = tmp_path / "trusted.md"
    runner.invoke(app, ["trust", "github-actions", "actions/checkout", "v4", "--trust-store", str(store_path)])

    result = runner.invoke(app, ["report", "--output", str(output_file), "--trust-store", str(store_path)])

    assert result.exit_code == 0
    assert "Generated:" in result.stdout

    content = output_file.read_text(encoding="utf-8")
    assert "## GitHub Actions (`github-actions`)" in content
    assert "[actions/checkout](https://github.com/actions/checkout)" in content


class TestDeployCheck:
    def test_approved(self, mocker):
        mock = mocker.patch("trustgate.cli._run_deploy_check", return_value=RuleVerdict(approved=True))

        result = runner.invoke(app, ["deploy-check", "deployment_protection_rule", "--action", "requested"])

        assert result.exit_code == 0
        assert "Deployment approved" in result.stdout

        event = mock.call_args.args[1]
        assert event.is_deployment_protection_rule_requested

    def test_denied(self, mocker):
        mocker.patch(
            "trustgate.cli._run_deploy_check",
            return_value=RuleVerdict(approved=False, denied_rule_name="Not-A-Public-Holiday"),
        )

        result = runner.invoke(app, ["deploy-check", "deployment_status"])

        assert result.exit_code == 1
        assert "Deployment denied by rule: Not-A-Public-Holiday" in result.stdout

    def test_disabled_by_default(self, tmp_path):
        config = tmp_path / "trustgate.json"
        config.write_text(json.dumps({"webhook": {"deploy": False}}), encoding="utf-8")

        result = runner.invoke(app, ["deploy-check", "deployment_status", "-c", str(config)])

        assert result.exit_code == 1
        assert "Enabled-By-Application-Configuration" in result.stdout

"""Command-line interface for trustgate.

Provides subcommands for checking whether a dependency version is trusted,
managing the trust store, and evaluating the deployment rules.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from trustgate.cache import ApplicationCache
from trustgate.config import Settings, load_settings
from trustgate.credentials import CredentialProvider, CredentialStore
from trustgate.evaluator import TrustDecision, TrustEvaluator
from trustgate.github import GitHubClient
from trustgate.models import (
    DependencyEcosystem,
    PackageReference,
    RepositoryId,
    RuleVerdict,
    TrustedDependency,
    WebhookEvent,
)
from trustgate.registries import create_registries
from trustgate.reporters import MarkdownReporter
from trustgate.rules import (
    CalendarRule,
    ConfigurationRule,
    GoogleCalendarClient,
    PublicHolidayProvider,
    PublicHolidayRule,
    evaluate_rules,
)
from trustgate.trust_store import SqliteTrustStore

app = typer.Typer(
    name="trustgate",
    help="Trust decisions for automated dependency updates and deployments.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger("trustgate")

ConfigOption = Annotated[
    Optional[Path],
    typer.Option(
        "--config",
        "-c",
        envvar="TRUSTGATE_CONFIG",
        help="Path to a JSON settings file",
        dir_okay=False,
    ),
]
TrustStoreOption = Annotated[
    Optional[Path],
    typer.Option(
        "--trust-store",
        envvar="TRUSTGATE_TRUST_STORE",
        help="Path to the trust store database",
        dir_okay=False,
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option(
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
]
EcosystemArgument = Annotated[
    DependencyEcosystem,
    typer.Argument(help="Dependency ecosystem", case_sensitive=False),
]
IdArgument = Annotated[str, typer.Argument(help="Dependency id, such as actions/checkout")]
VersionArgument = Annotated[str, typer.Argument(help="Dependency version")]


def _setup_logging(verbose: bool) -> None:
    """Configure logging level based on verbosity flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.getLogger("trustgate").setLevel(level)


def _load(config: Optional[Path], trust_store: Optional[Path]) -> Settings:
    try:
        settings = load_settings(config)
    except (ValueError, TypeError) as e:
        err_console.print(f"[red]Error loading {config}:[/red] {e}")
        raise typer.Exit(code=1)

    if trust_store is not None:
        settings.trust_store_path = trust_store
    return settings


def _github_credentials(settings: Settings, credentials: CredentialProvider) -> CredentialStore:
    """Use the App installation if it is configured, otherwise the user token."""
    github = settings.github
    if github.app_id and github.private_key and github.installation_id is not None:
        return credentials.installation()
    return credentials.user


async def _run_check(
    settings: Settings,
    repository: RepositoryId,
    reference: PackageReference,
) -> TrustDecision:
    cache = ApplicationCache()
    trust_store = SqliteTrustStore(settings.trust_store_path)

    async with CredentialProvider(settings.github, cache, settings.http_timeout) as credentials:
        async with GitHubClient(
            _github_credentials(settings, credentials),
            api_url=settings.github.api_url,
            graphql_url=settings.github.graphql_url,
            timeout=settings.http_timeout,
        ) as github:
            registries = create_registries(cache, github, settings.http_timeout)
            try:
                evaluator = TrustEvaluator(registries, trust_store, settings.webhook.trusted_entities)
                return await evaluator.evaluate(repository, reference)
            finally:
                for registry in registries.values():
                    await registry.close()


async def _run_deploy_check(settings: Settings, event: WebhookEvent) -> RuleVerdict:
    cache = ApplicationCache()

    async with GoogleCalendarClient(
        settings.google.access_token,
        timeout=settings.http_timeout,
    ) as calendar:
        rules = [
            ConfigurationRule(settings.webhook),
            CalendarRule(settings.google, calendar, cache),
            PublicHolidayRule(PublicHolidayProvider(settings.holidays.region)),
        ]
        return await evaluate_rules(rules, event)


@app.command()
def check(
    ecosystem: EcosystemArgument,
    id: IdArgument,
    version: VersionArgument,
    repository: Annotated[
        str,
        typer.Option(
            "--repository",
            "-r",
            envvar="GITHUB_REPOSITORY",
            help="Repository the update is for, as owner/name",
        ),
    ],
    config: ConfigOption = None,
    trust_store: TrustStoreOption = None,
    github_token: Annotated[
        Optional[str],
        typer.Option(
            "--github-token",
            envvar="GITHUB_TOKEN",
            help="GitHub API token used when no App installation is configured",
        ),
    ] = None,
    app_id: Annotated[
        Optional[str],
        typer.Option("--app-id", envvar="GITHUB_APP_ID", help="GitHub App id"),
    ] = None,
    private_key: Annotated[
        Optional[str],
        typer.Option(
            "--private-key",
            envvar="GITHUB_APP_PRIVATE_KEY",
            help="GitHub App private key (PEM)",
            show_default=False,
        ),
    ] = None,
    installation_id: Annotated[
        Optional[int],
        typer.Option(
            "--installation-id",
            envvar="GITHUB_APP_INSTALLATION_ID",
            help="GitHub App installation id",
        ),
    ] = None,
    verbose: VerboseOption = False,
) -> None:
    """Check whether a dependency version is trusted.

    Exit codes:
        0 - The dependency is trusted
        1 - The dependency is not trusted or an error occurred
    """
    _setup_logging(verbose)
    settings = _load(config, trust_store)

    if github_token:
        settings.github.access_token = github_token
    if app_id:
        settings.github.app_id = app_id
    if private_key:
        settings.github.private_key = private_key
    if installation_id is not None:
        settings.github.installation_id = installation_id

    try:
        repository_id = RepositoryId.parse(repository)
    except ValueError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    reference = PackageReference(ecosystem, id, version)

    try:
        decision = asyncio.run(_run_check(settings, repository_id, reference))
    except Exception as e:
        err_console.print(f"[red]Error checking {id}@{version}:[/red] {e}")
        raise typer.Exit(code=1)

    if decision.owners:
        console.print(f"[bold]Owners:[/bold] {', '.join(decision.owners)}")
    if decision.attestation is not None:
        console.print(f"[bold]Attestation:[/bold] {'valid' if decision.attestation else 'invalid'}")

    if decision.trusted:
        console.print(f"[green]Trusted:[/green] {id}@{version} ({decision.reason})")
        raise typer.Exit(code=0)

    console.print(f"[red]Not trusted:[/red] {id}@{version}")
    raise typer.Exit(code=1)


@app.command()
def trust(
    ecosystem: EcosystemArgument,
    id: IdArgument,
    version: VersionArgument,
    config: ConfigOption = None,
    trust_store: TrustStoreOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Trust a dependency version."""
    _setup_logging(verbose)
    settings = _load(config, trust_store)

    store = SqliteTrustStore(settings.trust_store_path)
    asyncio.run(store.trust(ecosystem, id, version))

    console.print(f"[green]Trusted:[/green] {ecosystem.value} {id}@{version}")


@app.command()
def distrust(
    ecosystem: EcosystemArgument,
    id: IdArgument,
    version: VersionArgument,
    config: ConfigOption = None,
    trust_store: TrustStoreOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Remove trust for a dependency version."""
    _setup_logging(verbose)
    settings = _load(config, trust_store)

    store = SqliteTrustStore(settings.trust_store_path)
    asyncio.run(store.distrust(ecosystem, id, version))

    console.print(f"[green]Distrusted:[/green] {ecosystem.value} {id}@{version}")


@app.command("distrust-all")
def distrust_all(
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Do not ask for confirmation"),
    ] = False,
    config: ConfigOption = None,
    trust_store: TrustStoreOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Remove trust for every dependency."""
    _setup_logging(verbose)
    settings = _load(config, trust_store)

    if not yes and not typer.confirm("Distrust every dependency?"):
        raise typer.Exit(code=1)

    store = SqliteTrustStore(settings.trust_store_path)
    count = asyncio.run(store.distrust_all())

    console.print(f"[green]Distrusted {count} dependencies[/green]")


@app.command("list")
def list_trusted(
    ecosystem: EcosystemArgument,
    config: ConfigOption = None,
    trust_store: TrustStoreOption = None,
    verbose: VerboseOption = False,
) -> None:
    """List the trusted versions of an ecosystem's dependencies."""
    _setup_logging(verbose)
    settings = _load(config, trust_store)

    store = SqliteTrustStore(settings.trust_store_path)
    dependencies = asyncio.run(store.get_trust(ecosystem))

    if not dependencies:
        console.print(f"[yellow]No trusted {ecosystem.value} dependencies[/yellow]")
        return

    table = Table(title=f"Trusted {ecosystem.value} dependencies")
    table.add_column("Dependency")
    table.add_column("Version")
    table.add_column("Trusted At")

    for dependency in sorted(dependencies, key=lambda d: (d.id.casefold(), d.version)):
        trusted_at = dependency.trusted_at.strftime("%Y-%m-%d %H:%M") if dependency.trusted_at else ""
        table.add_row(dependency.id, dependency.version, trusted_at)

    console.print(table)


@app.command()
def report(
    output: Annotated[
        Path,
        typer.Option(
            "--output",
            "-o",
            help="Output file path",
        ),
    ] = Path("trusted.md"),
    template: Annotated[
        Optional[Path],
        typer.Option(
            "--template",
            "-t",
            help="Custom Jinja2 template file",
            exists=True,
            readable=True,
        ),
    ] = None,
    config: ConfigOption = None,
    trust_store: TrustStoreOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Generate a Markdown report of the trust store."""
    _setup_logging(verbose)
    settings = _load(config, trust_store)

    store = SqliteTrustStore(settings.trust_store_path)

    async def get_all() -> dict[DependencyEcosystem, list[TrustedDependency]]:
        return {ecosystem: await store.get_trust(ecosystem) for ecosystem in DependencyEcosystem}

    dependencies = asyncio.run(get_all())

    reporter = MarkdownReporter(template_path=template)

    try:
        reporter.write(dependencies, output)
        console.print(f"[green]Generated:[/green] {output}")
    except OSError as e:
        err_console.print(f"[red]Error writing output:[/red] {e}")
        raise typer.Exit(code=1)


@app.command("deploy-check")
def deploy_check(
    event: Annotated[
        str,
        typer.Argument(help="GitHub webhook event name, such as deployment_protection_rule"),
    ],
    action: Annotated[
        Optional[str],
        typer.Option("--action", "-a", help="Webhook event action, such as requested"),
    ] = None,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Evaluate the deployment rules for a webhook event.

    Exit codes:
        0 - The deployment is approved
        1 - The deployment is denied or an error occurred
    """
    _setup_logging(verbose)
    settings = _load(config, None)

    try:
        verdict = asyncio.run(_run_deploy_check(settings, WebhookEvent(event, action)))
    except Exception as e:
        err_console.print(f"[red]Error evaluating deployment rules:[/red] {e}")
        raise typer.Exit(code=1)

    if verdict.approved:
        console.print("[green]Deployment approved[/green]")
        raise typer.Exit(code=0)

    console.print(f"[red]Deployment denied by rule:[/red] {verdict.denied_rule_name}")
    raise typer.Exit(code=1)


if __name__ == "__main__":
    app()

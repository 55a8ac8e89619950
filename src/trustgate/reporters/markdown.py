"""Markdown reporter for the trust store.

This module provides a reporter that lists the dependency versions trusted
by operators, linking each to its page in its ecosystem.
"""

from collections.abc import Mapping
from datetime import datetime
from importlib.resources import files
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, Template

from trustgate.cache import Clock, utc_now
from trustgate.models import DependencyEcosystem, TrustedDependency
from trustgate.reporters.base import BaseReporter
from trustgate.reporters.links import get_package_link


class MarkdownReporter(BaseReporter):
    """Reporter that renders trusted dependencies as Markdown.

    Attributes:
        template: The Jinja2 template to use for rendering.
        clock: Callable returning the time the report is generated.
    """

    def __init__(self, template_path: Optional[Path] = None, clock: Optional[Clock] = None) -> None:
        """Initialize the Markdown reporter.

        Args:
            template_path: Optional path to a custom Jinja2 template.
                If not provided, uses the default bundled template.
            clock: Optional clock for the generation timestamp.
        """
        if template_path:
            env = Environment(
                loader=FileSystemLoader(template_path.parent),
                autoescape=True,
            )
            self.template = env.get_template(template_path.name)
        else:
            self.template = self._load_default_template()

        self.clock = clock or utc_now

    def _load_default_template(self) -> Template:
        template_content = (
            files("trustgate.templates")
            .joinpath("trusted.md.j2")
            .read_text(encoding="utf-8")
        )
        env = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)
        return env.from_string(template_content)

    def render(self, dependencies: Mapping[DependencyEcosystem, list[TrustedDependency]]) -> str:
        sections = []

        for ecosystem in DependencyEcosystem:
            items = sorted(
                dependencies.get(ecosystem) or [],
                key=lambda d: (d.id.casefold(), d.version),
            )
            if not items:
                continue

            sections.append(
                {
                    "ecosystem": ecosystem.value,
                    "name": get_package_link(ecosystem, "", "").name,
                    "dependencies": [
                        {
                            "id": item.id,
                            "version": item.version,
                            "trusted_at": item.trusted_at,
                            "url": get_package_link(ecosystem, item.id, item.version).url,
                        }
                        for item in items
                    ],
                }
            )

        return self.template.render(
            sections=sections,
            total=sum(len(section["dependencies"]) for section in sections),
            generated_at=self.clock(),
        )

    @property
    def format_name(self) -> str:
        return "markdown"

    @property
    def default_extension(self) -> str:
        return ".md"

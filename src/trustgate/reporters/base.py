"""Base interface for trust store reporters.

Reporters generate formatted output from the dependencies recorded in the
trust store.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path

from trustgate.models import DependencyEcosystem, TrustedDependency


class BaseReporter(ABC):
    """Abstract base class for trust store reporters."""

    @abstractmethod
    def render(self, dependencies: Mapping[DependencyEcosystem, list[TrustedDependency]]) -> str:
        """Render trusted dependencies to formatted output.

        Args:
            dependencies: Trusted dependencies grouped by ecosystem.

        Returns:
            Rendered output as a string.
        """
        ...

    def write(
        self,
        dependencies: Mapping[DependencyEcosystem, list[TrustedDependency]],
        output_path: Path,
    ) -> None:
        """Render and write output to a file."""
        content = self.render(dependencies)
        output_path.write_text(content, encoding="utf-8")

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Return the output format name, such as "markdown"."""
        ...

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Return the default file extension, such as ".md"."""
        ...

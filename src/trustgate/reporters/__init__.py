"""Output reporters for the trust store.

This module provides reporters for rendering the trusted dependency
versions recorded by operators.
"""

from trustgate.reporters.base import BaseReporter
from trustgate.reporters.markdown import MarkdownReporter

__all__ = ["BaseReporter", "MarkdownReporter"]

"""trustgate - Trust decisions for automated dependency updates.

This package determines whether the publishers of updated dependencies are
trusted, records operator-approved dependency versions, and gates deployment
approval behind a chain of policy rules.
"""

__version__ = "0.1.0"

from trustgate.models import (
    DependencyEcosystem,
    PackageReference,
    RepositoryId,
    RuleVerdict,
    TrustedDependency,
    WebhookEvent,
)

__all__ = [
    "__version__",
    "DependencyEcosystem",
    "PackageReference",
    "RepositoryId",
    "RuleVerdict",
    "TrustedDependency",
    "WebhookEvent",
]

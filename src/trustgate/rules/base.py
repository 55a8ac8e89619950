"""Base interface for deployment rules.

Rules are small predicates evaluated in order against a webhook event. A
deployment is approved only if every enabled rule approves it.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable

from trustgate.models import RuleVerdict, WebhookEvent

logger = logging.getLogger(__name__)


class DeploymentRule(ABC):
    """Abstract base class for deployment rules.

    Subclasses return True when their precondition is absent (for example
    when nothing is configured) rather than raising.

    Attributes:
        name: Name reported when the rule denies a deployment.
        is_enabled: Whether the rule takes part in evaluation.
    """

    name: str = ""
    is_enabled: bool = True

    @abstractmethod
    async def evaluate(self, event: WebhookEvent) -> bool:
        """Evaluate the rule for a webhook event.

        Args:
            event: The event requesting approval.

        Returns:
            True if the rule approves the deployment, False otherwise.
        """
        ...


async def evaluate_rules(rules: Iterable[DeploymentRule], event: WebhookEvent) -> RuleVerdict:
    """Evaluate deployment rules in order, stopping at the first denial.

    Rules after a denying rule are never evaluated.

    Args:
        rules: Rules in the order they should be evaluated.
        event: The event requesting approval.

    Returns:
        RuleVerdict naming the first denying rule, or approved if every
        enabled rule approved (including when there are none).
    """
    for rule in rules:
        if not rule.is_enabled:
            continue

        if not await rule.evaluate(event):
            logger.info("Deployment denied by rule %s", rule.name)
            return RuleVerdict(approved=False, denied_rule_name=rule.name)

    return RuleVerdict(approved=True)

import logging

from trustgate.config import WebhookOptions
from trustgate.models import WebhookEvent
from trustgate.rules.base import DeploymentRule

logger = logging.getLogger(__name__)


class ConfigurationRule(DeploymentRule):
    """Approves deployments only when they are enabled in the configuration."""

    name = "Enabled-By-Application-Configuration"

    def __init__(self, options: WebhookOptions) -> None:
        self.options = options

    async def evaluate(self, event: WebhookEvent) -> bool:
        if not self.options.deploy:
            logger.info("Deployment is not approved as it is disabled in application configuration.")
        return self.options.deploy

"""Public holiday deployment rule.

The holiday data is bundled with the package and was obtained from
https://www.gov.uk/bank-holidays.json.
"""

import json
import logging
from datetime import date
from functools import lru_cache
from importlib.resources import files
from typing import Optional

from trustgate.cache import Clock, utc_now
from trustgate.models import WebhookEvent
from trustgate.rules.base import DeploymentRule

logger = logging.getLogger(__name__)

DEFAULT_REGION = "england-and-wales"


@lru_cache(maxsize=1)
def load_bank_holidays() -> dict[str, dict[date, str]]:
    """Load the bundled bank holidays.

    Returns:
        Mapping of region to a mapping of date to holiday title.
    """
    data = json.loads(
        files("trustgate.data").joinpath("bank-holidays.json").read_text(encoding="utf-8")
    )

    return {
        region: {
            date.fromisoformat(event["date"]): event["title"]
            for event in division.get("events", [])
        }
        for region, division in data.items()
    }


class PublicHolidayProvider:
    """Answers whether today is a public holiday in a region.

    Attributes:
        region: Region of the holidays, such as "england-and-wales".
        clock: Callable returning the current UTC time.
    """

    def __init__(self, region: str = DEFAULT_REGION, clock: Optional[Clock] = None) -> None:
        holidays = load_bank_holidays()
        if region not in holidays:
            raise ValueError(
                f"Unknown bank holiday region '{region}'. Choose from: {', '.join(sorted(holidays))}"
            )

        self.region = region
        self.clock = clock or utc_now
        self._holidays = holidays[region]

    def get_holiday(self, day: date) -> Optional[str]:
        """Return the title of the holiday on a date, if there is one."""
        return self._holidays.get(day)

    def is_public_holiday(self) -> bool:
        today = self.clock().date()
        title = self.get_holiday(today)

        if title is not None:
            logger.info("Today is the %s bank holiday in %s.", title, self.region)
            return True

        return False


class PublicHolidayRule(DeploymentRule):
    """Denies deployments on public holidays.

    Deployment protection rule requests are always approved, as a person has
    explicitly asked for the deployment.
    """

    name = "Not-A-Public-Holiday"

    def __init__(self, provider: PublicHolidayProvider) -> None:
        self.provider = provider

    async def evaluate(self, event: WebhookEvent) -> bool:
        if event.is_deployment_protection_rule_requested:
            return True

        if self.provider.is_public_holiday():
            logger.info("Deployment is not approved as today is a public holiday.")
            return False

        return True

"""Deployment rules gating the approval of deployments.

Rules are evaluated in order by evaluate_rules, which stops at the first
rule that denies the deployment.
"""

from trustgate.rules.base import DeploymentRule, evaluate_rules
from trustgate.rules.calendar import CalendarRule, GoogleCalendarClient
from trustgate.rules.configuration import ConfigurationRule
from trustgate.rules.holidays import PublicHolidayProvider, PublicHolidayRule

__all__ = [
    "DeploymentRule",
    "CalendarRule",
    "ConfigurationRule",
    "GoogleCalendarClient",
    "PublicHolidayProvider",
    "PublicHolidayRule",
    "evaluate_rules",
]

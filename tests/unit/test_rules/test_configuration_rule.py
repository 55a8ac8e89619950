import logging

from trustgate.config import WebhookOptions
from trustgate.models import WebhookEvent
from trustgate.rules import ConfigurationRule


async def test_enabled():
    rule = ConfigurationRule(WebhookOptions(deploy=True))

    assert await rule.evaluate(WebhookEvent(event="deployment_status"))


async def test_disabled(caplog):
    caplog.set_level(logging.INFO, logger="trustgate")
    rule = ConfigurationRule(WebhookOptions(deploy=False))

    assert not await rule.evaluate(WebhookEvent(event="deployment_status"))
    assert rule.name == "Enabled-By-Application-Configuration"
    assert "disabled in application configuration" in caplog.text


async def test_reads_current_options():
    options = WebhookOptions(deploy=False)
    rule = ConfigurationRule(options)

    options.deploy = True

    assert await rule.evaluate(WebhookEvent(event="deployment_status"))

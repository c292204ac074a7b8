"""Configuration loading for event-notifier."""

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from event_notifier.errors import ConfigError
from event_notifier.notifiers.pagerduty import DEFAULT_CLIENT_NAME, DEFAULT_EVENTS_URL

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _require_env(name: str) -> str:
    value = os.environ.get(name)
    if not value:
        raise ConfigError(f"could not read {name} from environment")
    return value


def _log_level(value: str, origin: str) -> str:
    level = value.upper()
    if level not in LOG_LEVELS:
        raise ConfigError(f"invalid log level {value!r} in {origin}")
    return level


@dataclass
class PagerDutyConfig:
    """PagerDuty integration configuration."""

    service_key: str
    events_url: str = DEFAULT_EVENTS_URL
    client_name: str = DEFAULT_CLIENT_NAME


@dataclass
class Config:
    """Application configuration.

    Secrets always come from the environment; a YAML file may only adjust
    non-secret settings.
    """

    slack_webhook_url: str
    pagerduty: PagerDutyConfig
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables.

        Raises:
            ConfigError: If SLACK_WEBHOOK_URL or PAGERDUTY_SERVICE_KEY is missing,
                or LOG_LEVEL is not a known level name
        """
        pagerduty = PagerDutyConfig(
            service_key=_require_env("PAGERDUTY_SERVICE_KEY"),
            events_url=os.environ.get("PAGERDUTY_EVENTS_URL", DEFAULT_EVENTS_URL),
            client_name=os.environ.get("PAGERDUTY_CLIENT", DEFAULT_CLIENT_NAME),
        )

        return cls(
            slack_webhook_url=_require_env("SLACK_WEBHOOK_URL"),
            pagerduty=pagerduty,
            log_level=_log_level(os.environ.get("LOG_LEVEL", "INFO"), "LOG_LEVEL"),
        )

    @classmethod
    def from_file(cls, path: Path) -> "Config":
        """Load configuration from YAML file, with env var overrides."""
        config = cls.from_env()

        if path.exists():
            with open(path) as f:
                try:
                    data = yaml.safe_load(f)
                except yaml.YAMLError as e:
                    raise ConfigError(f"invalid config file {path}: {e}") from e

            if data and "pagerduty" in data:
                pd = data["pagerduty"]
                if "PAGERDUTY_EVENTS_URL" not in os.environ:
                    config.pagerduty.events_url = pd.get("events_url", config.pagerduty.events_url)
                if "PAGERDUTY_CLIENT" not in os.environ:
                    config.pagerduty.client_name = pd.get("client", config.pagerduty.client_name)

            if data and "log_level" in data and "LOG_LEVEL" not in os.environ:
                config.log_level = _log_level(str(data["log_level"]), str(path))

        return config

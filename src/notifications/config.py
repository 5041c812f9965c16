"""Email notification settings and their startup validation.

Settings are read from the environment once per process:

    RESEND_API_KEY                   Resend API key, must start with ``re_``
    RESEND_FROM_EMAIL                sender address (default onboarding@resend.dev)
    RESEND_FROM_NAME                 sender display name
    ORDER_WEBHOOK_SECRET             shared secret expected in X-Webhook-Secret
    NOTIFICATION_RECIPIENT_OVERRIDE  send every notification to this address (ignored in production)
    PROTEAN_ENV                      runtime tier

Validation produces errors (the subsystem must not start in strict mode) and
warnings (logged only). Messages name variables but never contain their
values.
"""

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field

import structlog

from shared.errors import ConfigurationError

logger = structlog.get_logger(__name__)

API_KEY_PREFIX = "re_"
DEFAULT_FROM_EMAIL = "onboarding@resend.dev"
DEFAULT_FROM_NAME = "Storefront"
PROVIDER_TEST_DOMAIN = "resend.dev"
MIN_SECRET_LENGTH = 32
DEFAULT_ENVIRONMENT = "development"

API_KEY_PLACEHOLDER = "your_api_key_here"
WEBHOOK_SECRET_PLACEHOLDER = "your_webhook_secret_here"

# Variables with these prefixes are shipped to browsers
PUBLIC_PREFIXES = ("NEXT_PUBLIC_", "PUBLIC_")
SECRET_VARIABLES = ("RESEND_API_KEY", "ORDER_WEBHOOK_SECRET")

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(value: str | None) -> bool:
    return bool(value) and bool(EMAIL_PATTERN.match(value))


def _read(environ: Mapping[str, str], name: str) -> str | None:
    value = environ.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class EmailSettings:
    api_key: str | None = None
    from_email: str = DEFAULT_FROM_EMAIL
    from_name: str = DEFAULT_FROM_NAME
    webhook_secret: str | None = None
    recipient_override: str | None = None
    environment: str = DEFAULT_ENVIRONMENT

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "EmailSettings":
        environ = os.environ if environ is None else environ
        return cls(
            api_key=_read(environ, "RESEND_API_KEY"),
            from_email=_read(environ, "RESEND_FROM_EMAIL") or DEFAULT_FROM_EMAIL,
            from_name=_read(environ, "RESEND_FROM_NAME") or DEFAULT_FROM_NAME,
            webhook_secret=_read(environ, "ORDER_WEBHOOK_SECRET"),
            recipient_override=_read(environ, "NOTIFICATION_RECIPIENT_OVERRIDE"),
            environment=(_read(environ, "PROTEAN_ENV") or DEFAULT_ENVIRONMENT).lower(),
        )

    @property
    def sender(self) -> str:
        return f"{self.from_name} <{self.from_email}>"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def effective_recipient_override(self) -> str | None:
        """The override address, or None in production where it never applies."""
        if self.is_production:
            return None
        return self.recipient_override

    def __repr__(self) -> str:
        # Keep secrets out of tracebacks and debug output
        return (
            f"EmailSettings(from_email={self.from_email!r}, environment={self.environment!r}, "
            f"api_key_set={self.api_key is not None}, webhook_secret_set={self.webhook_secret is not None}, "
            f"recipient_override={self.recipient_override!r})"
        )


@dataclass(frozen=True)
class ConfigReport:
    valid: bool
    environment: str
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------
def _check_api_key(environ, errors, warnings):
    api_key = _read(environ, "RESEND_API_KEY")
    if api_key is None:
        errors.append("RESEND_API_KEY is not set. Get a key from https://resend.com/api-keys")
    elif API_KEY_PLACEHOLDER in api_key:
        errors.append("RESEND_API_KEY is still set to the placeholder value")
    elif not api_key.startswith(API_KEY_PREFIX):
        errors.append(f'RESEND_API_KEY has an invalid format, it must start with "{API_KEY_PREFIX}"')


def _check_sender(environ, environment, errors, warnings):
    from_email = _read(environ, "RESEND_FROM_EMAIL")
    if from_email is None:
        warnings.append(
            f"RESEND_FROM_EMAIL is not set, defaulting to {DEFAULT_FROM_EMAIL}. "
            "Configure a verified domain for production"
        )
        return

    if not is_valid_email(from_email):
        errors.append("RESEND_FROM_EMAIL is not a valid email address")
        return

    uses_test_domain = from_email.endswith("@" + PROVIDER_TEST_DOMAIN)
    if environment == "production" and uses_test_domain:
        warnings.append(
            f"Sending from the Resend test domain ({PROVIDER_TEST_DOMAIN}) in production. "
            "Verify your own domain for better deliverability"
        )
    if environment == "development" and not uses_test_domain:
        warnings.append(
            "Using a custom sender domain in development. Make sure it is verified in Resend, "
            f"or use {DEFAULT_FROM_EMAIL} for testing"
        )


def _check_webhook_secret(environ, errors, warnings):
    secret = _read(environ, "ORDER_WEBHOOK_SECRET")
    if secret is None:
        errors.append(
            "ORDER_WEBHOOK_SECRET is not set. It authenticates order status webhooks. "
            "Generate one with: openssl rand -base64 32"
        )
    elif WEBHOOK_SECRET_PLACEHOLDER in secret:
        errors.append("ORDER_WEBHOOK_SECRET is still set to the placeholder value")
    elif len(secret) < MIN_SECRET_LENGTH:
        warnings.append(f"ORDER_WEBHOOK_SECRET is shorter than the recommended {MIN_SECRET_LENGTH} characters")


def _check_recipient_override(environ, environment, errors, warnings):
    override = _read(environ, "NOTIFICATION_RECIPIENT_OVERRIDE")
    if override is None:
        return

    if not is_valid_email(override):
        errors.append("NOTIFICATION_RECIPIENT_OVERRIDE is not a valid email address")
    if environment == "production":
        warnings.append(
            "NOTIFICATION_RECIPIENT_OVERRIDE is set in production. It is ignored there and customers "
            "receive their own notifications. Remove it from the production configuration"
        )


def _check_public_exposure(environ, errors):
    exposed_values = {name: _read(environ, name) for name in SECRET_VARIABLES}

    for prefix in PUBLIC_PREFIXES:
        for name in SECRET_VARIABLES:
            if _read(environ, prefix + name) is not None:
                errors.append(
                    f"SECURITY: {name} is exposed through the public variable {prefix}{name}. "
                    "Remove it and rotate the credential immediately"
                )

    # The same value copied under any other public name
    for variable, value in environ.items():
        if not variable.startswith(PUBLIC_PREFIXES) or not value:
            continue
        for name, secret in exposed_values.items():
            if secret and value.strip() == secret and variable.removeprefix("NEXT_").removeprefix("PUBLIC_") != name:
                errors.append(
                    f"SECURITY: the value of {name} is exposed through the public variable {variable}. "
                    "Remove it and rotate the credential immediately"
                )


def validate_email_environment(environ: Mapping[str, str] | None = None) -> ConfigReport:
    """Validate the notification subsystem configuration."""
    environ = os.environ if environ is None else environ
    environment = (_read(environ, "PROTEAN_ENV") or DEFAULT_ENVIRONMENT).lower()
    errors: list[str] = []
    warnings: list[str] = []

    _check_api_key(environ, errors, warnings)
    _check_sender(environ, environment, errors, warnings)
    _check_webhook_secret(environ, errors, warnings)
    _check_recipient_override(environ, environment, errors, warnings)
    _check_public_exposure(environ, errors)

    return ConfigReport(valid=not errors, environment=environment, errors=errors, warnings=warnings)


def validate_and_log_email_config(
    throw_on_error: bool = True,
    environ: Mapping[str, str] | None = None,
) -> ConfigReport:
    """Validate the configuration and log every finding.

    Raises:
        ConfigurationError: If ``throw_on_error`` is set and validation failed.
    """
    report = validate_email_environment(environ)

    for error in report.errors:
        logger.error("Email configuration error", detail=error, environment=report.environment)
    for warning in report.warnings:
        logger.warning("Email configuration warning", detail=warning, environment=report.environment)

    if report.valid:
        logger.info(
            "Email configuration is valid",
            environment=report.environment,
            warnings=len(report.warnings),
        )
    else:
        logger.error(
            "Email configuration has errors",
            environment=report.environment,
            errors=len(report.errors),
        )
        if throw_on_error:
            raise ConfigurationError(
                "Email notifications are not properly configured: " + "; ".join(report.errors)
            )

    return report


def config_summary(environ: Mapping[str, str] | None = None) -> dict:
    """Configuration overview safe to log or expose on a health page."""
    environ = os.environ if environ is None else environ
    settings = EmailSettings.from_env(environ)
    return {
        "environment": settings.environment,
        "api_key_configured": settings.api_key is not None,
        "api_key_format": f"{settings.api_key[:5]}..." if settings.api_key else "not set",
        "from_email": settings.from_email,
        "webhook_secret_configured": settings.webhook_secret is not None,
        "recipient_override": settings.recipient_override or "none",
        "recipient_override_active": settings.effective_recipient_override is not None,
        "is_production": settings.is_production,
        "is_development": settings.environment == "development",
    }


def is_email_configured(environ: Mapping[str, str] | None = None) -> bool:
    return validate_email_environment(environ).valid

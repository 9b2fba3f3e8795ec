"""
Shared-secret check for inbound HOT Pay webhooks.

HOT Pay does not sign its callbacks, so the webhook URL can carry a secret
header (X-Webhook-Secret) instead. When HOTPAY_WEBHOOK_SECRET is unset the
check is skipped, with a WARNING at import so a production deployment
without it is visible.
"""
import secrets
import warnings

from shared.config import settings

if not settings.HOTPAY_WEBHOOK_SECRET:
    warnings.warn(
        "HOTPAY_WEBHOOK_SECRET is not set. Webhook callbacks are accepted "
        "without a shared-secret check. Set this env var in production!",
        stacklevel=2,
    )

WEBHOOK_SECRET_HEADER = "X-Webhook-Secret"


def verify_webhook_secret(provided: str | None) -> bool:
    """Constant-time comparison against the configured secret; passes when none is configured."""
    expected = settings.HOTPAY_WEBHOOK_SECRET
    if not expected:
        return True
    if not provided:
        return False
    return secrets.compare_digest(str(provided), str(expected))

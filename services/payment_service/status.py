"""
HOT Pay status vocabulary -> internal payment status.

HOT Pay reports open-ended status strings. Only the tokens listed here are
interpreted; the webhook path is fail-closed (anything that is not an exact
success is a failure), the lookup path leaves unknown tokens pending so the
client keeps polling.
"""
from services.order_service.models import PaymentStatus

SUCCESS_TOKEN = "SUCCESS"
FAILED_TOKEN = "FAILED"


def map_webhook_status(token: str | None) -> PaymentStatus:
    if token == SUCCESS_TOKEN:
        return PaymentStatus.COMPLETED
    return PaymentStatus.FAILED


def map_lookup_status(token: str | None) -> PaymentStatus | None:
    if token == SUCCESS_TOKEN:
        return PaymentStatus.COMPLETED
    if token == FAILED_TOKEN:
        return PaymentStatus.FAILED
    return None

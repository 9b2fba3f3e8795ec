from .setup import setup_observability
from .metrics import (
    storefront_orders_total,
    storefront_reconciliation_total,
    storefront_gateway_lookups_total,
    storefront_gateway_lookup_duration_seconds,
)

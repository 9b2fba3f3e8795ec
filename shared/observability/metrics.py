from prometheus_client import Counter, Histogram

# Business Metrics
storefront_orders_total = Counter(
    "storefront_orders_total",
    "Order creation requests by outcome",
    ["outcome"] # Labels: 'created', 'reused', 'reissued', 'already_purchased', 'template_not_found', 'error'
)

storefront_reconciliation_total = Counter(
    "storefront_reconciliation_total",
    "Reconciliation attempts by path and resulting status",
    ["path", "status"] # path: 'webhook' or 'poll'; status: 'completed', 'failed', 'pending', 'duplicate'
)

storefront_gateway_lookups_total = Counter(
    "storefront_gateway_lookups_total",
    "Outbound HOT Pay status lookups",
    ["result"] # Labels: 'found', 'empty', 'error'
)

storefront_gateway_lookup_duration_seconds = Histogram(
    "storefront_gateway_lookup_duration_seconds",
    "HOT Pay status lookup duration in seconds"
)

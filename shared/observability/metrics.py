from prometheus_client import Counter

# Business Metrics
warehouse_product_list_cache_total = Counter(
    "warehouse_product_list_cache_total",
    "Product listing cache lookups",
    ["result"]  # Labels: 'hit', 'miss'
)

warehouse_product_mutations_total = Counter(
    "warehouse_product_mutations_total",
    "Product writes attempted",
    ["operation", "status"]  # operation: 'create', 'update', 'delete'; status: 'success', 'failed'
)

warehouse_login_total = Counter(
    "warehouse_login_total",
    "Login attempts",
    ["status"]  # Labels: 'success', 'failed'
)

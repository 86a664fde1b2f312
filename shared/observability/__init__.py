from .setup import setup_observability
from .metrics import (
    warehouse_product_list_cache_total,
    warehouse_product_mutations_total,
    warehouse_login_total,
)

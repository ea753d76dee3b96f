# API Route Constants

API_BASE = '/api'

# Catalog routes
CATALOG_BASE = f'{API_BASE}/catalog'
CATALOG_LIST = CATALOG_BASE
CATALOG_AUDIT = f'{CATALOG_BASE}/audit'
CATALOG_PRICE_UPDATE = f'{CATALOG_BASE}/{{item_id}}/price'

# Booking routes
BOOK = f'{API_BASE}/book'

# Order routes
ORDERS_BASE = f'{API_BASE}/orders'
ORDERS_BY_BUYER = f'{ORDERS_BASE}/{{buyer_id}}'

# System routes
HEALTH = '/health'
METRICS = '/metrics'

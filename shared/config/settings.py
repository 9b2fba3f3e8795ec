import os
from dotenv import load_dotenv

load_dotenv()

# HOT Pay gateway
HOTPAY_BASE_URL = os.getenv("HOTPAY_BASE_URL", "https://pay.hot-labs.org")
HOTPAY_API_URL = os.getenv("HOTPAY_API_URL", "https://api.hot-labs.org")
HOTPAY_API_TOKEN = os.getenv("HOTPAY_API_TOKEN", "")
HOTPAY_ITEM_ID = os.getenv("HOTPAY_ITEM_ID", "")
HOTPAY_WEBHOOK_SECRET = os.getenv("HOTPAY_WEBHOOK_SECRET", "")
HOTPAY_TIMEOUT_SECONDS = float(os.getenv("HOTPAY_TIMEOUT_SECONDS", "10"))

# Public base URL of this storefront, used to build webhook/redirect URLs
APP_URL = os.getenv("APP_URL", "").rstrip("/")

ORDER_RATE_LIMIT = os.getenv("ORDER_RATE_LIMIT", "10/minute")

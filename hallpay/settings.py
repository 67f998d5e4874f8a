"""Django settings for the Hall coin exchange.


The service runs a small conversion flow:
- Coins → USD preview (no mutation)
- Coin debit → pending payment with a hosted charge reference (processor_stub)
- Processor confirmation webhook → crypto credit + completed order


Webhook signature verification is intentionally omitted; see DESIGN.md.
"""

import os
from pathlib import Path
from decimal import Decimal


BASE_DIR = Path(__file__).resolve().parent.parent
SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-only-insecure-key")
DEBUG = os.getenv("DEBUG", "1") in ("1", "true", "True", "yes")
ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "*").split(",")
CSRF_TRUSTED_ORIGINS = os.getenv("CSRF_TRUSTED_ORIGINS", "").split(",") if os.getenv("CSRF_TRUSTED_ORIGINS") else []

#######################
# Conversion economics
COINS_PER_USD = Decimal(os.getenv("COINS_PER_USD", "100"))
STARTING_COINS = Decimal(os.getenv("STARTING_COINS", "2000"))

# Bounds for a single coin → crypto conversion (inclusive)
MIN_CONVERSION_COINS = int(os.getenv("MIN_CONVERSION_COINS", "2000"))
MAX_CONVERSION_COINS = int(os.getenv("MAX_CONVERSION_COINS", "10500"))

# Crypto credited on confirmation, priced by the (mock) feed
DEFAULT_CRYPTO = os.getenv("DEFAULT_CRYPTO", "BTC").upper()
MOCK_CRYPTO_PRICE_USD = Decimal(os.getenv("MOCK_BTC_PRICE", "30000"))

# Grant given to every newly registered user
STARTER_CRYPTO = {
    "BTC": Decimal(os.getenv("STARTER_BTC", "0.0005")),
    "ETH": Decimal(os.getenv("STARTER_ETH", "0.01")),
}

# External collaborators, swapped for real clients in production
PAYMENT_PROCESSOR = os.getenv("PAYMENT_PROCESSOR", "core.adapters.processor_adapter.ProcessorAdapter")
PRICE_FEED = os.getenv("PRICE_FEED", "core.adapters.price_adapter.PriceFeedAdapter")
HOSTED_CHARGE_BASE_URL = os.getenv("HOSTED_CHARGE_BASE_URL", "https://commerce.coinbase.com/charges/mock-hosted-url")
#######################


INSTALLED_APPS = [
	# local apps
	"core",
	"api",
	"processor_stub",
]


MIDDLEWARE = [
	"django.middleware.security.SecurityMiddleware",
	"django.middleware.common.CommonMiddleware",
	"django.middleware.csrf.CsrfViewMiddleware",
]


ROOT_URLCONF = "hallpay.urls"
TEMPLATES = []


WSGI_APPLICATION = "hallpay.wsgi.application"


DB_ENGINE = os.getenv("DB_ENGINE", "sqlite")
if DB_ENGINE == "postgres":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.getenv("POSTGRES_DB", "hallpay"),
            "USER": os.getenv("POSTGRES_USER", "hallpay"),
            "PASSWORD": os.getenv("POSTGRES_PASSWORD", "hallpay"),
            "HOST": os.getenv("POSTGRES_HOST", "localhost"),
            "PORT": os.getenv("POSTGRES_PORT", "5432"),
        }
    }
else:
    # IMMEDIATE transactions take the write lock up front: one writer at a time
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
            "OPTIONS": {
                "transaction_mode": "IMMEDIATE",
                "timeout": 20,
            },
            # File-backed so threads share one test database
            "TEST": {"NAME": BASE_DIR / "test_db.sqlite3"},
        }
    }


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "loggers": {
        "core": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "api": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "processor_stub": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}


LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True


DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

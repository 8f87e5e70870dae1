"""Configuration management for the Landed Cost Bot."""
import os
from dotenv import load_dotenv

load_dotenv()


def clean_env_value(value):
    """Clean environment variable value - strip whitespace AND quotes.

    Hosting dashboards sometimes add quotes around values.
    This function removes them so tokens work correctly.
    """
    if not value:
        return ""
    value = value.strip()
    if len(value) >= 2:
        if (value.startswith('"') and value.endswith('"')) or \
           (value.startswith("'") and value.endswith("'")):
            value = value[1:-1]
        # Only one side quoted (partial corruption)
        elif value.startswith('"') or value.startswith("'"):
            value = value[1:]
        elif value.endswith('"') or value.endswith("'"):
            value = value[:-1]
    return value.strip()


def _float_env(name, default):
    raw = clean_env_value(os.getenv(name))
    return float(raw) if raw else default


# Telegram Bot Token (get from @BotFather)
TELEGRAM_BOT_TOKEN = clean_env_value(os.getenv("TELEGRAM_BOT_TOKEN"))

# Currency used when an invoice is entered without one
DEFAULT_CURRENCY = (clean_env_value(os.getenv("DEFAULT_CURRENCY")) or "USD").upper()

# Tax percentage used by /landed when no tax= argument is given
DEFAULT_TAX_RATE = _float_env("DEFAULT_TAX_RATE", 10.0)

# How many invoices / freight records the dashboard lists
RECENT_ACTIVITY_LIMIT = int(os.getenv("RECENT_ACTIVITY_LIMIT", "3"))

LOG_LEVEL = (clean_env_value(os.getenv("LOG_LEVEL")) or "INFO").upper()

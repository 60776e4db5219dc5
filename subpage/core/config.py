import os
from dotenv import load_dotenv

load_dotenv(override=True)


def _env_flag(name, default='1'):
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """
    Base configuration for subscription pages.
    Projects should provide database paths via environment variables.
    """
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY')

    # Get DB_DIR from environment, or use a default if not set
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))

    # Database paths - use environment variables or fallback to DB_DIR
    PAGES_DB = os.getenv('PAGES_DB', os.path.join(DB_DIR, 'pages.db'))
    LOG_DB = os.getenv('LOG_DB', os.path.join(DB_DIR, 'app_logs.db'))

    # Table names
    PAGES_TABLE = 'pages'
    LOGS_TABLE = 'app_logs'

    # Default content
    CREATE_DEFAULT_PAGES = _env_flag('CREATE_DEFAULT_PAGES')

    # Subscription page settings
    # Parsed by get_days_verification_link_alive(); None when unset
    DAYS_VERIFICATION_LINK_ALIVE = os.getenv('DAYS_VERIFICATION_LINK_ALIVE')
    MAILING_LIST_ADMIN_URL = os.getenv('MAILING_LIST_ADMIN_URL', '/admin/newsletter/mailing-lists')
    SUBSCRIPTION_SUBMIT_URL = os.getenv('SUBSCRIPTION_SUBMIT_URL', '/api/subscribers')

    # Translations
    LOCALE = os.getenv('LOCALE', 'en')

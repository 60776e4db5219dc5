"""
SubscriptionPages Flask extension.

    app = Flask(__name__)
    SubscriptionPages(app, {
        'create_default_pages': True,
        'mailing_list_source': MyMailingLists(),
    })
"""

import os
import logging

from .core import Config, _t, Requirements
from .modules.subscription_page import (
    subscription_pages_admin_bp, subscription_pages_bp, SubscriptionPage
)

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'subpage'

# Config dict key -> app.config key
CONFIG_KEYS = {
    'create_default_pages': 'CREATE_DEFAULT_PAGES',
    'days_verification_link_alive': 'DAYS_VERIFICATION_LINK_ALIVE',
    'mailing_list_admin_url': 'MAILING_LIST_ADMIN_URL',
    'submit_url': 'SUBSCRIPTION_SUBMIT_URL',
    'locale': 'LOCALE',
    'translations': 'TRANSLATIONS',
}


class SubscriptionPages:

    def __init__(self, app=None, config=None):
        self._config = dict(config or {})
        self.recipient_source = self._config.get('recipient_source')
        self.mailing_list_source = self._config.get('mailing_list_source')
        self._registered_modules = []
        self.default_page = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self._apply_config(app)
        self._setup_database_dir(app)
        app.extensions[EXTENSION_KEY] = self
        self._register_blueprints(app)
        self._setup_context_processor(app)

        with app.app_context():
            SubscriptionPage.init_tables()
            self.default_page = SubscriptionPage.require_default_records()

        logger.info(f"Subscription pages initialised: {', '.join(self._registered_modules)}")

    def _apply_config(self, app):
        """Fill app.config from the extension config, then from Config defaults"""
        for key, config_key in CONFIG_KEYS.items():
            if key in self._config:
                app.config[config_key] = self._config[key]

        db_dir = app.config.setdefault('DB_DIR', Config.DB_DIR)
        app.config.setdefault('PAGES_DB', os.path.join(db_dir, 'pages.db'))
        app.config.setdefault('LOG_DB', os.path.join(db_dir, 'app_logs.db'))
        for config_key in CONFIG_KEYS.values():
            if config_key not in app.config and hasattr(Config, config_key):
                app.config[config_key] = getattr(Config, config_key)

    def _setup_database_dir(self, app):
        for key in ('DB_DIR', 'PAGES_DB', 'LOG_DB'):
            path = app.config.get(key)
            if not path:
                continue
            directory = path if key == 'DB_DIR' else os.path.dirname(path)
            if directory:
                os.makedirs(directory, exist_ok=True)

    def _register_blueprints(self, app):
        for blueprint in (subscription_pages_admin_bp, subscription_pages_bp):
            if blueprint.name not in app.blueprints:
                app.register_blueprint(blueprint)
            self._registered_modules.append(blueprint.name)

    def _setup_context_processor(self, app):

        @app.context_processor
        def inject_subpage_context():
            context = {'_t': _t}
            context.update(Requirements.template_context())
            return context

    def get_registered_modules(self):
        return list(self._registered_modules)

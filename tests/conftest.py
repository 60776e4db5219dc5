"""
Shared fixtures: a Flask app with SubscriptionPages registered against
temporary sqlite databases.
"""

import os
import shutil
import tempfile

import pytest
from flask import Flask

from subpage import SubscriptionPages

MAILING_LISTS = [
    {'id': 1, 'title': 'Weekly digest', 'recipient_count': 12},
    {'id': 2, 'title': 'Product news'},
    {'id': 5, 'title': 'Events'},
]


def make_app(db_dir, config=None, **app_config):
    app = Flask(__name__)
    app.config['TESTING'] = True
    app.config['SECRET_KEY'] = 'test-secret'
    app.config['DB_DIR'] = db_dir
    app.config['PAGES_DB'] = os.path.join(db_dir, 'pages.db')
    app.config['LOG_DB'] = os.path.join(db_dir, 'app_logs.db')
    app.config.update(app_config)
    SubscriptionPages(app, config)
    return app


@pytest.fixture
def tmp_db_dir():
    """Create a temporary directory for test databases, cleaned up after."""
    d = tempfile.mkdtemp(prefix='subpage-test-')
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def app(tmp_db_dir):
    """App with default page provisioning and three configured mailing lists."""
    return make_app(tmp_db_dir, {'create_default_pages': True}, MAILING_LISTS=MAILING_LISTS)


@pytest.fixture
def empty_app(tmp_db_dir):
    """App without default content and without mailing lists."""
    return make_app(tmp_db_dir, {'create_default_pages': False}, MAILING_LISTS=[])


@pytest.fixture
def app_ctx(app):
    with app.test_request_context('/'):
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(app):
    client = app.test_client()
    with client.session_transaction() as sess:
        sess['admin_id'] = 1
    return client

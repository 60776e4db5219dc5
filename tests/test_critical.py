"""
Critical Integration Tests for Subscription Pages
=================================================

Focused tests covering the integration points most likely to break.
Run with: pytest tests/test_critical.py -v

NOTE: pytest is listed under extras_require["dev"] in setup.py.
Install with: pip install -e ".[dev]"
"""

import os
import shutil
import tempfile

from flask import Flask

from subpage import SubscriptionPages
from subpage.modules.subscription_page import SubscriptionPage


# ---------------------------------------------------------------------------
# 1. Extension initialisation -- SubscriptionPages(app) does not raise
# ---------------------------------------------------------------------------

def test_extension_initialisation(tmp_db_dir):
    """SubscriptionPages(app) boots without errors and stores itself on the app."""
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["DB_DIR"] = tmp_db_dir
    app.config["PAGES_DB"] = os.path.join(tmp_db_dir, "pages.db")
    app.config["LOG_DB"] = os.path.join(tmp_db_dir, "app_logs.db")

    ext = SubscriptionPages(app)

    assert "subpage" in app.extensions
    assert app.extensions["subpage"] is ext


# ---------------------------------------------------------------------------
# 2. Config resolution -- DB paths default from DB_DIR
# ---------------------------------------------------------------------------

def test_config_db_paths_default_from_db_dir(tmp_db_dir):
    """PAGES_DB and LOG_DB resolve inside DB_DIR when only DB_DIR is set."""
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["DB_DIR"] = tmp_db_dir

    SubscriptionPages(app, {'create_default_pages': False})

    assert app.config["PAGES_DB"] == os.path.join(tmp_db_dir, "pages.db")
    assert app.config["LOG_DB"] == os.path.join(tmp_db_dir, "app_logs.db")
    assert app.config["CREATE_DEFAULT_PAGES"] is False


# ---------------------------------------------------------------------------
# 3. Blueprint registration -- admin and public blueprints are registered
# ---------------------------------------------------------------------------

EXPECTED_MODULES = [
    "subscription_pages_admin",
    "subscription_pages",
]


def test_all_blueprints_registered(app):
    registered = app.extensions["subpage"].get_registered_modules()

    for mod in EXPECTED_MODULES:
        assert mod in registered, (
            f"Module '{mod}' was not registered. Registered: {registered}"
        )
        assert mod in app.blueprints

    assert len(registered) == len(EXPECTED_MODULES)


# ---------------------------------------------------------------------------
# 4. Template context -- _t and asset requirements are injected
# ---------------------------------------------------------------------------

def test_template_context_injection(app):
    with app.test_request_context("/"):
        ctx = {}
        for func in app.template_context_processors[None]:
            ctx.update(func())

        assert "_t" in ctx, "_t missing from template context"
        assert callable(ctx["_t"])
        assert ctx["requirements_js"] == []
        assert ctx["requirements_css"] == []


# ---------------------------------------------------------------------------
# 5. Database directory creation -- the configured DB_DIR is created
# ---------------------------------------------------------------------------

def test_database_dir_creation():
    d = tempfile.mkdtemp(prefix="subpage-dbtest-")
    target = os.path.join(d, "sub", "databases")

    try:
        app = Flask(__name__)
        app.config["TESTING"] = True
        app.config["DB_DIR"] = target

        SubscriptionPages(app)

        assert os.path.isdir(target), f"DB_DIR was not created at {target}"
        assert os.path.isfile(os.path.join(target, "pages.db"))
    finally:
        shutil.rmtree(d, ignore_errors=True)


# ---------------------------------------------------------------------------
# 6. Default content -- one published subscription page after setup
# ---------------------------------------------------------------------------

def test_default_page_provisioned(app):
    with app.app_context():
        assert SubscriptionPage.count() == 1
        live = SubscriptionPage.get_by_url_segment("newsletter-subscription", stage="live")

    assert live is not None
    assert app.extensions["subpage"].default_page.id == live.id


# ---------------------------------------------------------------------------
# 7. Admin auth guard -- unauthenticated request redirects to login
# ---------------------------------------------------------------------------

def test_admin_auth_redirect(client):
    """Unauthenticated GET to /admin/subscription-pages/ should redirect to login."""
    response = client.get("/admin/subscription-pages/", follow_redirects=False)
    assert response.status_code == 302, (
        f"Expected 302 redirect, got {response.status_code}"
    )
    assert "/admin" in response.headers.get("Location", ""), (
        "Redirect location should point to /admin (login)"
    )


# ---------------------------------------------------------------------------
# 8. Public page -- the default page renders
# ---------------------------------------------------------------------------

def test_public_page_renders(client):
    response = client.get("/newsletter/newsletter-subscription")
    assert response.status_code == 200
    assert b"Newsletter Subscription" in response.data
    assert b'name="Email"' in response.data

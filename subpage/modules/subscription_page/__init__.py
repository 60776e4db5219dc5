"""
Subscription Page Module
========================

Newsletter subscription page type, configurable from the admin:
- Admin editor for the subscription form (fields, labels, validation
  messages, mailing lists, notification email, completion message)
- Public page rendering the configured form
- CORS-enabled JSON config for embedding the form on other sites

Usage:
    from subpage.modules.subscription_page import (
        subscription_pages_admin_bp, subscription_pages_bp
    )

    app.register_blueprint(subscription_pages_admin_bp)  # /admin/subscription-pages
    app.register_blueprint(subscription_pages_bp)        # /newsletter/<url_segment>
"""

from flask import Blueprint

# Admin editor (session auth)
subscription_pages_admin_bp = Blueprint(
    'subscription_pages_admin',
    __name__,
    url_prefix='/admin/subscription-pages',
    template_folder='templates',
    static_folder='static',
    static_url_path='/subscription-page/static'
)

# Public subscription pages
subscription_pages_bp = Blueprint(
    'subscription_pages',
    __name__,
    url_prefix='/newsletter',
    template_folder='templates'
)

from . import routes
from .models import SubscriptionPage, parse_required_field_names, get_days_verification_link_alive

__all__ = ['subscription_pages_admin_bp', 'subscription_pages_bp', 'SubscriptionPage',
           'parse_required_field_names', 'get_days_verification_link_alive']

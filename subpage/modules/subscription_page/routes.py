"""
Subscription Page Routes
========================

Admin (session auth required):
- GET  /admin/subscription-pages/                -- list subscription pages
- GET  /admin/subscription-pages/<id>/edit       -- editing form
- GET  /admin/subscription-pages/<id>/fields     -- editing form as JSON
- POST /admin/subscription-pages/<id>/save       -- save draft (publish=1 also publishes)

Public:
- GET /newsletter/<url_segment>                  -- the subscription form
- GET /newsletter/<url_segment>/config.json      -- form config (CORS enabled)

Submissions are handled by SUBSCRIPTION_SUBMIT_URL, not here.
"""

import sqlite3
import logging
from functools import wraps
from urllib.parse import quote
from flask import render_template, request, redirect, url_for, session, jsonify, flash, abort
from flask_cors import cross_origin

from subpage.core import get_config_value
from . import subscription_pages_admin_bp, subscription_pages_bp
from .models import SubscriptionPage, default_recipient_source, default_mailing_list_source

logger = logging.getLogger(__name__)


def _db_log(level, message, details=None):
    """Log to framework's persistent DB logger"""
    try:
        from subpage.core import db_log
        db_log(level, 'subscription_page', message, details)
    except Exception:
        pass


def admin_required(f):
    """Decorator to require admin login"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'admin_id' not in session:
            login_url = get_config_value('ADMIN_LOGIN_URL', '/admin/login')
            return redirect(f'{login_url}?next={quote(request.path)}')
        return f(*args, **kwargs)
    return decorated_function


def _get_page_or_404(page_id):
    page = SubscriptionPage.get_by_id(page_id)
    if page is None:
        abort(404)
    return page


def _editing_form(page):
    fields = page.get_cms_fields()
    fields.load_from(page)
    return fields


# ===================
# ADMIN ROUTES
# ===================

@subscription_pages_admin_bp.route('/')
@admin_required
def list_pages():
    """List subscription pages with their publication state"""
    pages = SubscriptionPage.get_list(stage='draft')
    return jsonify({
        'success': True,
        'pages': [
            {
                'id': page.id,
                'title': page.title,
                'url_segment': page.url_segment,
                'version': page.version,
                'is_published': page.is_published(),
                'edit_url': url_for('.edit_page', page_id=page.id),
            }
            for page in pages
        ]
    })


@subscription_pages_admin_bp.route('/<int:page_id>/edit')
@admin_required
def edit_page(page_id):
    """Subscription page editing form"""
    page = _get_page_or_404(page_id)
    fields = _editing_form(page)
    return render_template('subscription_page/edit.html', page=page, fields=fields)


@subscription_pages_admin_bp.route('/<int:page_id>/fields')
@admin_required
def page_fields(page_id):
    """Editing form as JSON"""
    page = _get_page_or_404(page_id)
    fields = _editing_form(page)
    return jsonify({'success': True, 'page_id': page.id, 'fields': fields.to_dict()})


@subscription_pages_admin_bp.route('/<int:page_id>/save', methods=['POST'])
@admin_required
def save_page(page_id):
    """Save the editing form into the draft, optionally publishing it"""
    page = _get_page_or_404(page_id)
    publish = request.form.get('publish') or request.args.get('publish')

    try:
        fields = page.get_cms_fields()
        fields.save_into(page, request.form)
        page.write()
        if publish:
            page.publish_recursive()

        logger.info(f"Subscription page {page.id} saved (published: {bool(publish)})")
        _db_log('info', f'Subscription page saved: {page.title}', {'id': page.id, 'published': bool(publish)})
        flash('Page published' if publish else 'Page saved', 'success')

    except sqlite3.Error as e:
        logger.error(f"Database error saving subscription page {page_id}: {e}")
        _db_log('error', 'Database error saving subscription page', {'id': page_id, 'error': str(e)})
        flash('Database error occurred while saving the page', 'error')
    except Exception as e:
        logger.error(f"Error saving subscription page {page_id}: {e}")
        _db_log('error', 'Error saving subscription page', {'id': page_id, 'error': str(e)})
        flash(f'Error saving page: {str(e)}', 'error')

    return redirect(url_for('.edit_page', page_id=page_id))


# ===================
# PUBLIC ROUTES
# ===================

@subscription_pages_bp.route('/<url_segment>')
def show_page(url_segment):
    """Public subscription form"""
    page = SubscriptionPage.get_by_url_segment(url_segment, stage='live')
    if page is None:
        abort(404)

    form = page.to_frontend_dict(default_recipient_source(), default_mailing_list_source())
    return render_template('subscription_page/page.html', page=page, form=form)


@subscription_pages_bp.route('/<url_segment>/config.json')
@cross_origin()
def page_config(url_segment):
    """Form configuration for rendering the form elsewhere"""
    try:
        page = SubscriptionPage.get_by_url_segment(url_segment, stage='live')
        if page is None:
            return jsonify({'error': 'Subscription page not found'}), 404

        return jsonify(page.to_frontend_dict(default_recipient_source(), default_mailing_list_source())), 200

    except sqlite3.Error as e:
        logger.error(f"Database error in page_config: {e}")
        _db_log('error', 'Database error in page_config', {'url_segment': url_segment, 'error': str(e)})
        return jsonify({'error': 'Database error occurred'}), 500

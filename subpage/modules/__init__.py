"""
Subpage Modules
===============

Flask modules making up subscription pages.
"""

__all__ = ['forms', 'pages', 'recipients', 'mailing_lists', 'subscription_page']

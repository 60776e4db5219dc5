"""
Subpage - Newsletter Subscription Pages for Flask
=================================================

A configurable newsletter subscription page type:
- Admin editor for the subscription form (fields, required flags, labels,
  validation messages, mailing lists, notification email)
- Public subscription page and embeddable form config
- Default page provisioning on setup

Usage:
    from subpage import SubscriptionPages

    SubscriptionPages(app)
"""

__version__ = '0.1.0'

from .framework import SubscriptionPages

__all__ = ['SubscriptionPages']

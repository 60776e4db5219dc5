"""
Recipients Module
=================

The newsletter recipient entity as far as subscription forms need it:
its front-end field definitions, and a field source that subscription
pages enumerate when building their editing form.
"""

from .models import Recipient, RecipientFieldSource

__all__ = ['Recipient', 'RecipientFieldSource']

"""
Mailing Lists Module
====================

Read-only enumeration of the mailing lists a subscription page can offer.
Storage of the lists belongs to the host; by default they are read from
app.config['MAILING_LISTS'].
"""

from .models import (
    MailingList, MailingListSource, ConfigMailingListSource, StaticMailingListSource,
    mailing_list_admin_link
)

__all__ = ['MailingList', 'MailingListSource', 'ConfigMailingListSource',
           'StaticMailingListSource', 'mailing_list_admin_link']

"""
Mailing List Models
===================
"""

import logging
from flask import url_for
from werkzeug.routing import BuildError
from subpage.core import get_config_value

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_URL = '/admin/newsletter/mailing-lists'


class MailingList:

    def __init__(self, id, title, recipient_count=None):
        self.id = id
        self.title = title
        self.recipient_count = recipient_count

    def __repr__(self):
        return f'<MailingList {self.id} {self.title!r}>'

    def __eq__(self, other):
        return isinstance(other, MailingList) and (self.id, self.title) == (other.id, other.title)

    def __hash__(self):
        return hash((self.id, self.title))

    @property
    def full_title(self):
        """Title with the recipient count when it is known, e.g. 'Weekly (12)'"""
        if self.recipient_count is None:
            return self.title
        return f'{self.title} ({self.recipient_count})'

    def to_dict(self):
        return {'id': self.id, 'title': self.title, 'full_title': self.full_title}

    @classmethod
    def from_dict(cls, data):
        return cls(data['id'], data.get('title') or str(data['id']), data.get('recipient_count'))


class MailingListSource:
    """Anything with a list_mailing_lists() method returning MailingList objects"""

    def list_mailing_lists(self):
        raise NotImplementedError


class StaticMailingListSource(MailingListSource):

    def __init__(self, mailing_lists=None):
        self.mailing_lists = [
            m if isinstance(m, MailingList) else MailingList.from_dict(m)
            for m in (mailing_lists or [])
        ]

    def list_mailing_lists(self):
        return list(self.mailing_lists)


class ConfigMailingListSource(MailingListSource):
    """
    Reads app.config['MAILING_LISTS'] on every call, e.g.
        [{'id': 1, 'title': 'Weekly digest', 'recipient_count': 120}]
    """

    def list_mailing_lists(self):
        mailing_lists = []
        for entry in get_config_value('MAILING_LISTS', []) or []:
            if isinstance(entry, MailingList):
                mailing_lists.append(entry)
            elif isinstance(entry, dict) and entry.get('id') is not None:
                mailing_lists.append(MailingList.from_dict(entry))
            else:
                logger.warning(f"Ignoring mailing list entry without an id: {entry!r}")
        return mailing_lists


def mailing_list_admin_link():
    """
    Link to the mailing-list administration screen. MAILING_LIST_ADMIN_URL is
    either a URL or an endpoint name such as 'newsletter_admin.mailing_lists'.
    """
    target = get_config_value('MAILING_LIST_ADMIN_URL', DEFAULT_ADMIN_URL) or DEFAULT_ADMIN_URL
    if '/' in target or ':' in target:
        return target
    try:
        return url_for(target)
    except (BuildError, RuntimeError):
        logger.warning(f"Could not build mailing list admin link for endpoint {target!r}")
        return DEFAULT_ADMIN_URL

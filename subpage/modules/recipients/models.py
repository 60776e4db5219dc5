"""
Recipient Models
================

Field definitions of a newsletter recipient. Only the front-end fields are
offered on subscription forms; bookkeeping columns (verification hash,
bounce counters) never are.
"""

import logging
from subpage.core import get_config_value, _t
from subpage.modules.forms import FieldList, TextField, EmailField

logger = logging.getLogger(__name__)


class Recipient:

    db = {
        'Email': 'Varchar',
        'FirstName': 'Varchar',
        'MiddleName': 'Varchar',
        'Surname': 'Varchar',
        'Salutation': 'Varchar',
        'LanguagePreferred': 'Varchar',
        'Verified': 'Boolean',
        'BouncedCount': 'Int',
        'ReceivedCount': 'Int',
        'ValidateHash': 'Varchar',
        'ValidateHashExpired': 'Datetime',
    }

    field_labels = {
        'Email': 'Email',
        'FirstName': 'First name',
        'MiddleName': 'Middle name',
        'Surname': 'Surname',
        'Salutation': 'Salutation',
        'LanguagePreferred': 'Preferred language',
    }

    front_end_excluded = ['Verified', 'BouncedCount', 'ReceivedCount', 'ValidateHash', 'ValidateHashExpired']

    @classmethod
    def get_front_end_fields(cls):
        fields = FieldList()
        for name in cls.db:
            if name in cls.front_end_excluded:
                continue
            title = _t(f'Recipient.{name}', cls.field_labels.get(name, name))
            field_class = EmailField if name == 'Email' else TextField
            fields.push(field_class(name, title))
        return fields


class RecipientFieldSource:
    """
    Lists the recipient's front-end fields. Extra fields can be passed in, or
    configured as app.config['RECIPIENT_EXTRA_FIELDS'] = [{'name': ..., 'title': ...}].
    """

    def __init__(self, extra_fields=None):
        self.extra_fields = extra_fields

    def _extra_fields(self):
        if self.extra_fields is not None:
            return self.extra_fields
        return get_config_value('RECIPIENT_EXTRA_FIELDS', []) or []

    def front_end_fields(self):
        fields = Recipient.get_front_end_fields()
        for definition in self._extra_fields():
            name = definition.get('name') if isinstance(definition, dict) else None
            if not name:
                logger.warning(f"Ignoring recipient field definition without a name: {definition!r}")
                continue
            if fields.field_by_name(name) is not None:
                continue
            field_class = EmailField if definition.get('type') == 'email' else TextField
            fields.push(field_class(name, definition.get('title') or name))
        return fields

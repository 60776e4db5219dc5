"""
Forms Module
============

Field library used to compose CMS editing forms:
- FormField and its concrete fields (text, email, hidden, header, literal,
  rich text, checkbox, checkbox set)
- CompositeField, Tab and TabSet containers
- FieldList, the ordered field collection returned by get_cms_fields()
- CheckboxSetWithExtraField, a checkbox set whose rows carry extra
  per-option attributes (custom label, validation message, required)

Each field renders to HTML (render), describes itself as JSON (to_dict) and
reads/writes its value from/into a record (load_from / save_into).
"""

from .fields import (
    FormField, TextField, EmailField, HiddenField, HeaderField, LiteralField,
    HtmlEditorField, CheckboxField, CheckboxSetField, CompositeField, Tab, TabSet,
    FieldList, get_list, parse_value_list
)
from .checkbox_set_extra import CheckboxSetWithExtraField

__all__ = [
    'FormField', 'TextField', 'EmailField', 'HiddenField', 'HeaderField', 'LiteralField',
    'HtmlEditorField', 'CheckboxField', 'CheckboxSetField', 'CompositeField', 'Tab', 'TabSet',
    'FieldList', 'CheckboxSetWithExtraField', 'get_list', 'parse_value_list'
]

"""
Pages Module
============

Generic page record used as the base of all page types:
- draft and live stages (write / publish_recursive)
- joined tables for page subclasses
- get_cms_fields() editing-form hook and require_default_records() setup hook
"""

from .models import Page, slugify, to_boolean, stage_table

__all__ = ['Page', 'slugify', 'to_boolean', 'stage_table']

"""
Subscription Page Models
========================

The newsletter subscription page type. Editors pick which recipient fields
the public form shows, mark them required, override labels and validation
messages, choose the mailing lists on offer and configure the notification
email and the completion message.

Stored shapes:
    fields              comma-separated field names, in display order
    required            JSON map, e.g. {"Email":"1","Surname":"1"}
    custom_label        JSON map, e.g. {"Email":"Email address"}
    validation_message  JSON map, e.g. {"Email":"An email address is required"}
    mailing_lists       JSON list of mailing list ids, e.g. ["1","5"];
                        loose lists such as { "1", "5" } are read too

Email is the recipient's identifier, so it is always selected and required;
this is enforced when reading, not when storing.
"""

import json
import logging
from flask import current_app
from markupsafe import escape

from subpage.core import get_config_value, _t, Requirements
from subpage.modules.pages import Page, to_boolean
from subpage.modules.forms import (
    FieldList, Tab, HeaderField, TextField, CheckboxSetField, LiteralField,
    CompositeField, HtmlEditorField, HiddenField, CheckboxSetWithExtraField, parse_value_list
)
from subpage.modules.recipients import RecipientFieldSource
from subpage.modules.mailing_lists import ConfigMailingListSource, mailing_list_admin_link

logger = logging.getLogger(__name__)

EMAIL_FIELD = 'Email'
DEFAULT_REQUIRED = '{"Email":"1"}'
DEFAULT_DAYS_VERIFICATION_LINK_ALIVE = 2

DEFAULT_PAGE_TITLE = 'Newsletter Subscription'
DEFAULT_PAGE_URL_SEGMENT = 'newsletter-subscription'


def _db_log(level, message, details=None):
    """Log to framework's persistent DB logger"""
    try:
        from subpage.core import db_log
        db_log(level, 'subscription_page', message, details)
    except Exception:
        pass


def parse_required_field_names(raw):
    """
    Names of the required fields in a stored Required string.

    Handles one flat shape only, {"Name":"1","Other":"1"}: the text is split
    on commas after trimming the outer braces, and the quoted key before each
    colon is kept. Empty fragments are dropped and each name appears once.
    Email is appended when missing. Escaped commas or nested values are not
    supported.
    """
    names = []
    for fragment in (raw or '').strip().strip('{}').split(','):
        name = fragment.split(':', 1)[0].strip().strip('"').strip()
        if name and name not in names:
            names.append(name)
    if EMAIL_FIELD not in names:
        names.append(EMAIL_FIELD)
    return names


def parse_json_map(raw):
    """Decode a stored JSON object of field name -> text; {} when malformed"""
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except (ValueError, TypeError):
        return {}
    if not isinstance(value, dict):
        return {}
    return {str(k): '' if v is None else str(v) for k, v in value.items()}


def parse_id_list(raw):
    """
    Decode stored mailing list ids with the same reader the editing form's
    checkbox set uses; numeric ids become ints.
    """
    ids = []
    for item in parse_value_list(raw):
        item = int(item) if item.isdigit() else item
        if item not in ids:
            ids.append(item)
    return ids


def order_field_candidates(front_fields, selected_names):
    """
    Candidate fields for the editing form: the selected ones first, in their
    stored order, then every other available field.

    Args:
        front_fields: mapping of field name -> form field
        selected_names: stored selection, in order

    Returns:
        dict of field name -> label (field title, or the name when untitled)
    """
    remaining = dict(front_fields)
    candidates = {}
    for name in selected_names:
        if name in remaining:
            field = remaining.pop(name)
            candidates[name] = field.title or field.name
    for name, field in remaining.items():
        candidates[name] = field.title or field.name
    return candidates


def get_days_verification_link_alive():
    """
    Configured number of days a verification link stays valid; 2 when not
    set, not a number, or below 2.
    """
    value = get_config_value('DAYS_VERIFICATION_LINK_ALIVE', DEFAULT_DAYS_VERIFICATION_LINK_ALIVE)
    try:
        days = int(value)
    except (TypeError, ValueError):
        return DEFAULT_DAYS_VERIFICATION_LINK_ALIVE
    return days if days >= DEFAULT_DAYS_VERIFICATION_LINK_ALIVE else DEFAULT_DAYS_VERIFICATION_LINK_ALIVE


def _extension():
    try:
        return current_app.extensions.get('subpage')
    except RuntimeError:
        return None


def default_recipient_source():
    ext = _extension()
    if ext is not None and ext.recipient_source is not None:
        return ext.recipient_source
    return RecipientFieldSource()


def default_mailing_list_source():
    ext = _extension()
    if ext is not None and ext.mailing_list_source is not None:
        return ext.mailing_list_source
    return ConfigMailingListSource()


class SubscriptionPage(Page):

    table_name = 'subscription_pages'
    db = {
        'fields': 'Text',
        'required': 'Text',
        'customised_heading': 'Text',
        'custom_label': 'Text',
        'validation_message': 'Text',
        'mailing_lists': 'Text',
        'submission_button_text': 'Varchar',
        'send_notification': 'Boolean',
        'notification_email_subject': 'Varchar',
        'notification_email_from': 'Varchar',
        'on_complete_message': 'HTMLText',
    }
    defaults = {
        'fields': EMAIL_FIELD,
        'submission_button_text': 'Submit',
    }
    singular_name = 'Newsletter Subscription Page'
    plural_name = 'Newsletter Subscription Pages'

    @classmethod
    def require_default_records(cls):
        """Create and publish one subscription page if none exists yet"""
        super().require_default_records()

        if not to_boolean(get_config_value('CREATE_DEFAULT_PAGES', True)):
            return None
        if cls.count():
            return None

        page = cls(
            title=DEFAULT_PAGE_TITLE,
            url_segment=DEFAULT_PAGE_URL_SEGMENT,
            send_notification=True,
            show_in_menus=False,
        )
        page.write()
        page.publish_recursive()
        logger.info(f"Created default subscription page {page.id}")
        _db_log('info', 'Newsletter Subscription page created', {'id': page.id, 'url_segment': page.url_segment})
        return page

    @staticmethod
    def get_days_verification_link_alive():
        return get_days_verification_link_alive()

    # ---- accessors ----

    def selected_field_names(self):
        """Stored field selection in order; ['Email'] when nothing is stored"""
        names = [name.strip() for name in (self.fields or '').split(',') if name.strip()]
        return names or [EMAIL_FIELD]

    def get_required(self):
        """
        Stored Required JSON, or {"Email":"1"} when nothing is stored.
        The stored value is passed through as is.
        """
        required = self.get_field('required')
        return required if required else DEFAULT_REQUIRED

    def get_required_field_names(self):
        """Required field names; Email is always included, once"""
        return parse_required_field_names(self.get_required())

    def get_custom_labels(self):
        return parse_json_map(self.custom_label)

    def get_validation_messages(self):
        return parse_json_map(self.validation_message)

    def get_mailing_list_ids(self):
        return parse_id_list(self.mailing_lists)

    def get_selected_mailing_lists(self, mailing_list_source=None):
        """Mailing lists offered by this page, in the source's order"""
        source = mailing_list_source or default_mailing_list_source()
        selected = {str(i) for i in self.get_mailing_list_ids()}
        return [m for m in source.list_mailing_lists() if str(m.id) in selected]

    def get_frontend_field_list(self, front_end_fields):
        """
        The recipient's front-end fields narrowed to this page's selection,
        in the selected order. Names that match no field are skipped.
        """
        selected = FieldList()
        for name in self.selected_field_names():
            field = front_end_fields.field_by_name(name)
            if field is not None and selected.field_by_name(name) is None:
                selected.push(field)
        return selected

    def to_frontend_dict(self, recipient_source=None, mailing_list_source=None):
        """Everything the front-end form renderer needs, JSON-serialisable"""
        source = recipient_source or default_recipient_source()
        labels = self.get_custom_labels()
        messages = self.get_validation_messages()
        required = self.get_required_field_names()

        fields = []
        for field in self.get_frontend_field_list(source.front_end_fields()):
            fields.append({
                'name': field.name,
                'type': field.field_type,
                'label': labels.get(field.name) or field.title,
                'required': field.name in required,
                'validation_message': messages.get(field.name, ''),
            })

        return {
            'id': self.id,
            'title': self.title,
            'url_segment': self.url_segment,
            'heading': self.customised_heading,
            'fields': fields,
            'required_fields': required,
            'custom_labels': labels,
            'validation_messages': messages,
            'mailing_lists': [m.to_dict() for m in self.get_selected_mailing_lists(mailing_list_source)],
            'submission_button_text': self.submission_button_text,
            'on_complete_message': self.on_complete_message,
            'days_verification_link_alive': get_days_verification_link_alive(),
            'submit_url': get_config_value('SUBSCRIPTION_SUBMIT_URL'),
        }

    # ---- editing form ----

    def get_cms_fields(self, recipient_source=None, mailing_list_source=None):
        fields = super().get_cms_fields()
        recipient_source = recipient_source or default_recipient_source()
        mailing_list_source = mailing_list_source or default_mailing_list_source()

        subscription_tab = Tab('SubscriptionForm', _t('Newsletter.SUBSCRIPTIONFORM', 'SubscriptionForm'))
        fields.add_field_to_tab('Root', subscription_tab)

        subscription_tab.push(HeaderField(
            'SubscriptionFormConfig',
            _t('Newsletter.SUBSCRIPTIONFORMCONFIGURATION', 'Subscription Form Configuration')
        ))
        subscription_tab.push(TextField('customised_heading', 'Heading at the top of the form'))

        # Fields selection, selected fields on top
        selected_names = self.selected_field_names()
        candidates = order_field_candidates(recipient_source.front_end_fields().data_fields(), selected_names)

        fields_selection = CheckboxSetWithExtraField(
            'fields',
            _t('Newsletter.SelectFields', 'Select the fields to display on the subscription form'),
            candidates,
            [name for name in selected_names if name in candidates],
            {'custom_label': 'Varchar', 'validation_message': 'Varchar', 'required': 'Boolean'},
            {
                'custom_label': self.custom_label,
                'validation_message': self.validation_message,
                'required': self.get_required(),
            }
        )
        # Email is the recipient's identifier: always selected and required
        fields_selection.set_cell_disabled({EMAIL_FIELD: ['value', 'required']})
        subscription_tab.push(fields_selection)

        # Mailing lists selection
        mailing_lists = mailing_list_source.list_mailing_lists()
        if mailing_lists:
            newsletter_selection = CheckboxSetField(
                'mailing_lists',
                _t('Newsletter.SubscribeTo', 'Newsletters to subscribe to'),
                {str(m.id): m.full_title for m in mailing_lists},
                [str(i) for i in self.get_mailing_list_ids()]
            )
        else:
            newsletter_selection = LiteralField(
                'NoMailingList',
                '<p>You haven\'t defined any mailing list yet, please go to '
                f'<a href="{escape(mailing_list_admin_link())}">the newsletter administration area</a> '
                'to define a mailing list.</p>'
            )
        subscription_tab.push(newsletter_selection)

        subscription_tab.push(TextField('submission_button_text', 'Submit Button Text'))

        # Translations may leave out the %d placeholder
        days_text = _t('Newsletter.DaysVerificationIsValid', 'Validation for verification email is %d days')
        days_text = days_text.replace('%d', str(get_days_verification_link_alive()))
        subscription_tab.push(LiteralField(
            'DaysVerificationIsValid',
            f'<div id="DaysVerificationIsValid">{escape(days_text)}<br/></div>'
        ))

        Requirements.javascript('subscription_pages_admin/SubscriptionPage.js')
        Requirements.css('subscription_pages_admin/SubscriptionPage.css')
        selected_panel = 'yes' if self.send_notification else 'no'
        subscription_tab.push(LiteralField(
            'BottomTaskSelection',
            f'<div id="SendNotificationControlls" class="field actions" data-selected="{selected_panel}">'
            f'<label class="left">{escape(_t("Newsletter.SendNotif", "Send notification email to the subscriber"))}</label>'
            f'<ul><li class="ss-ui-button no" data-panel="no">{escape(_t("Newsletter.No", "No"))}</li>'
            f'<li class="ss-ui-button yes" data-panel="yes">{escape(_t("Newsletter.Yes", "Yes"))}</li>'
            '</ul></div>'
        ))

        notification_panel = CompositeField(
            HiddenField('send_notification', 'Send Notification'),
            TextField(
                'notification_email_subject',
                _t('Newsletter.NotifSubject', 'Notification Email Subject Line')
            ),
            TextField(
                'notification_email_from',
                _t('Newsletter.FromNotif', 'From Email Address for Notification Email')
            ),
        ).add_extra_class('SendNotificationControlledPanel')
        notification_panel.set_hidden(not self.send_notification)
        subscription_tab.push(notification_panel)

        subscription_tab.push(HtmlEditorField(
            'on_complete_message',
            _t('Newsletter.OnCompletion', 'Message shown on subscription completion')
        ))
        return fields

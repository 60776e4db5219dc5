"""
Form field library: field lists, tabs and the checkbox set with extra
per-option attributes.
"""

import json
from types import SimpleNamespace

from werkzeug.datastructures import MultiDict

from subpage.modules.forms import (
    FieldList, TabSet, Tab, TextField, HeaderField, LiteralField, CheckboxField,
    CheckboxSetField, CompositeField, HiddenField, CheckboxSetWithExtraField, parse_value_list
)
from subpage.modules.forms.checkbox_set_extra import parse_extra_value
from subpage.modules.subscription_page import SubscriptionPage

SOURCE = {'Email': 'Email', 'FirstName': 'First name', 'Surname': 'Surname'}
EXTRA = {'custom_label': 'Varchar', 'validation_message': 'Varchar', 'required': 'Boolean'}


def make_selection(value=None, extra_value=None):
    field = CheckboxSetWithExtraField('fields', 'Fields', SOURCE, value or ['Email'], EXTRA, extra_value or {})
    field.set_cell_disabled({'Email': ['value', 'required']})
    return field


# ---------------------------------------------------------------------------
# FieldList
# ---------------------------------------------------------------------------

def test_add_field_to_tab_creates_tabs():
    fields = FieldList()
    fields.add_field_to_tab('Root.Main', TextField('title'))
    fields.add_field_to_tab('Root.Extra', TextField('subtitle'))

    root = fields.field_by_name('Root')
    assert isinstance(root, TabSet)
    assert [tab.name for tab in root.children] == ['Main', 'Extra']
    assert fields.field_by_name('Root.Extra.subtitle').name == 'subtitle'
    assert fields.field_by_name('subtitle') is fields.field_by_name('Root.Extra.subtitle')


def test_add_tab_to_existing_tabset():
    fields = FieldList(TabSet('Root', Tab('Main')))
    tab = Tab('SubscriptionForm', 'Subscription form')
    fields.add_field_to_tab('Root', tab)

    assert [t.name for t in fields.field_by_name('Root').children] == ['Main', 'SubscriptionForm']


def test_data_fields_skip_headers_and_literals():
    fields = FieldList(
        HeaderField('Heading', 'Heading'),
        TextField('title'),
        CompositeField(HiddenField('flag'), LiteralField('Note', '<p>note</p>')),
    )
    assert list(fields.data_fields()) == ['title', 'flag']


def test_text_field_render_escapes_value():
    field = TextField('title', 'Title', '<script>alert(1)</script>')
    html = str(field.render())
    assert '<script>' not in html
    assert '&lt;script&gt;' in html


def test_checkbox_absent_means_unchecked():
    record = SimpleNamespace(show_in_menus=True)
    CheckboxField('show_in_menus').save_into(record, MultiDict())
    assert record.show_in_menus is False


def test_text_field_not_submitted_keeps_value():
    record = SimpleNamespace(title='Keep me')
    TextField('title').save_into(record, MultiDict())
    assert record.title == 'Keep me'


def test_checkbox_set_saves_known_options_as_json():
    record = SimpleNamespace(mailing_lists='')
    field = CheckboxSetField('mailing_lists', 'Lists', {1: 'One', 2: 'Two'})
    field.save_into(record, MultiDict([('mailing_lists', '2'), ('mailing_lists', '9')]))
    assert json.loads(record.mailing_lists) == ['2']


def test_checkbox_set_options_checked_state():
    field = CheckboxSetField('mailing_lists', 'Lists', {1: 'One', 2: 'Two'}, '["2"]')
    assert [(o['value'], o['checked']) for o in field.options()] == [('1', False), ('2', True)]


# ---------------------------------------------------------------------------
# CheckboxSetWithExtraField
# ---------------------------------------------------------------------------

def test_parse_extra_value_tolerates_bad_storage():
    assert parse_extra_value(None) == {}
    assert parse_extra_value('') == {}
    assert parse_extra_value('{broken') == {}
    assert parse_extra_value('["Email"]') == {}
    assert parse_extra_value('{"Email":"1"}') == {'Email': '1'}


def test_locked_email_row():
    field = make_selection(value=['FirstName'], extra_value={'required': '{}'})
    rows = {row['name']: row for row in field.rows()}

    assert rows['Email']['checked'] is True
    assert rows['Email']['disabled'] is True
    assert rows['Email']['extra']['required']['disabled'] is True
    assert rows['Email']['extra']['required']['value'] == '1'
    assert rows['Email']['extra']['custom_label']['disabled'] is False
    assert rows['FirstName']['disabled'] is False
    assert field.selected() == ['Email', 'FirstName']


def test_extra_values_shown_per_row():
    field = make_selection(
        value=['Email', 'Surname'],
        extra_value={'custom_label': '{"Surname":"Family name"}', 'required': '{"Surname":"1"}'}
    )
    rows = {row['name']: row for row in field.rows()}
    assert rows['Surname']['extra']['custom_label']['value'] == 'Family name'
    assert rows['Surname']['extra']['required']['value'] == '1'
    assert rows['FirstName']['extra']['required']['value'] == ''


def test_save_into_writes_selection_and_extras():
    page = SubscriptionPage()
    data = MultiDict([
        ('fields', 'Surname'),
        ('fields', 'FirstName'),
        ('fields[custom_label][Surname]', ' Family name '),
        ('fields[custom_label][FirstName]', ''),
        ('fields[validation_message][Surname]', 'Please tell us your surname'),
        ('fields[required][Surname]', '1'),
        ('fields[required][FirstName]', '0'),
    ])

    make_selection().save_into(page, data)

    # Email's checkbox is disabled in the browser, so it is re-added
    assert page.fields == 'Email,Surname,FirstName'
    assert page.required == '{"Email":"1","Surname":"1"}'
    assert page.custom_label == '{"Surname":"Family name"}'
    assert page.validation_message == '{"Surname":"Please tell us your surname"}'


def test_save_into_ignores_unknown_and_unselected_rows():
    page = SubscriptionPage()
    data = MultiDict([
        ('fields', 'Email'),
        ('fields', 'Bogus'),
        ('fields[required][Surname]', '1'),
        ('fields[custom_label][Surname]', 'Family name'),
    ])

    make_selection().save_into(page, data)

    assert page.fields == 'Email'
    assert page.required == '{"Email":"1"}'
    assert page.custom_label == '{}'


def test_render_disables_locked_cells():
    html = str(make_selection().render())
    assert 'name="fields[required][Email]" value="1" checked disabled' in html
    assert 'name="fields" value="Email" checked disabled' in html


def test_render_marks_set_as_submitted():
    html = str(make_selection().render())
    assert '<input type="hidden" name="fields" value="">' in html


def test_save_into_skips_when_not_submitted():
    page = SubscriptionPage(
        fields='Email,Surname',
        required='{"Email":"1","Surname":"1"}',
        custom_label='{"Surname":"Family name"}',
    )
    make_selection().save_into(page, MultiDict([('title', 'Join us')]))

    assert page.fields == 'Email,Surname'
    assert page.required == '{"Email":"1","Surname":"1"}'
    assert page.custom_label == '{"Surname":"Family name"}'


def test_save_into_with_only_the_empty_entry_keeps_email():
    page = SubscriptionPage(fields='Email,Surname', custom_label='{"Surname":"Family name"}')
    make_selection().save_into(page, MultiDict([('fields', '')]))

    assert page.fields == 'Email'
    assert page.required == '{"Email":"1"}'
    assert page.custom_label == '{}'


# ---------------------------------------------------------------------------
# Stored multi-values
# ---------------------------------------------------------------------------

def test_parse_value_list_shapes():
    assert parse_value_list('["1", "5"]') == ['1', '5']
    assert parse_value_list('{ "1", "5" }') == ['1', '5']
    assert parse_value_list('"1","5"') == ['1', '5']
    assert parse_value_list('1, 5, 5') == ['1', '5']
    assert parse_value_list('{"a": 1, "b": 5}') == ['1', '5']
    assert parse_value_list([1, '5']) == ['1', '5']
    assert parse_value_list('') == []
    assert parse_value_list(None) == []


def test_checkbox_set_reads_loose_stored_lists():
    source = {'1': 'Weekly', '5': 'Events', '7': 'Offers'}
    for stored in ('{ "1", "5" }', '"1","5"'):
        field = CheckboxSetField('mailing_lists', 'Lists', source)
        field.load_from(SimpleNamespace(mailing_lists=stored))
        assert [o['value'] for o in field.options() if o['checked']] == ['1', '5']

"""
Required-field parsing: Email is always required, exactly once, whatever
is stored.
"""

import pytest

from subpage.modules.subscription_page import SubscriptionPage, parse_required_field_names
from subpage.modules.subscription_page.models import DEFAULT_REQUIRED


def test_default_required_when_nothing_stored():
    page = SubscriptionPage()
    assert page.get_required() == '{"Email":"1"}'
    assert page.get_required() == DEFAULT_REQUIRED


def test_stored_required_passed_through_verbatim():
    page = SubscriptionPage(required='{"Surname":"1"}')
    assert page.get_required() == '{"Surname":"1"}'

    page = SubscriptionPage(required='not json at all')
    assert page.get_required() == 'not json at all'


def test_parse_keeps_stored_order():
    assert parse_required_field_names('{"Email":"1","Surname":"1"}') == ['Email', 'Surname']
    assert parse_required_field_names('{"FirstName":"1","Email":"1"}') == ['FirstName', 'Email']


def test_parse_appends_missing_email():
    assert parse_required_field_names('{"Surname":"1"}') == ['Surname', 'Email']


def test_parse_tolerates_spaces_around_keys():
    assert parse_required_field_names('{ "FirstName": "1", "Surname" : "1" }') == ['FirstName', 'Surname', 'Email']


@pytest.mark.parametrize('raw', [
    None,
    '',
    '{}',
    '{,,}',
    '{:}',
    '{"":"1"}',
    'garbage',
    '{"Email":"1","Email":"1"}',
    '{"Email":"1", "Email":"0", "Surname":"1"}',
    '{"Surname"}',
    '[1, 2, 3]',
])
def test_email_present_exactly_once(raw):
    names = parse_required_field_names(raw)
    assert names.count('Email') == 1


def test_empty_fragments_dropped():
    assert parse_required_field_names('{,"Surname":"1",,}') == ['Surname', 'Email']
    assert parse_required_field_names('{:"1"}') == ['Email']


def test_page_required_field_names():
    assert SubscriptionPage().get_required_field_names() == ['Email']
    page = SubscriptionPage(required='{"Surname":"1","FirstName":"1"}')
    assert page.get_required_field_names() == ['Surname', 'FirstName', 'Email']

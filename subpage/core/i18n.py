"""
Translation lookup.

Strings are looked up by identifier (e.g. 'Newsletter.SUBSCRIPTIONFORM') in
app.config['TRANSLATIONS'][locale]; the default text is returned when the
identifier has no translation for the active locale.
"""

from .database import get_config_value


def get_locale():
    return get_config_value('LOCALE', 'en') or 'en'


def _t(key, default=''):
    try:
        translations = get_config_value('TRANSLATIONS', {}) or {}
        text = translations.get(get_locale(), {}).get(key)
    except AttributeError:
        text = None
    return text if text else default

"""
Form Fields
===========

Field classes for CMS editing forms. Values are loaded from a record with
load_from() and written back with save_into(); a record that defines
set_field(name, value) gets its values type-cast there.
"""

import json
from markupsafe import Markup, escape


def get_list(data, name):
    """Read a multi-valued form entry from a MultiDict or a plain dict"""
    if data is None:
        return []
    if hasattr(data, 'getlist'):
        return data.getlist(name)
    value = data.get(name)
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def parse_value_list(raw):
    """
    Decode a stored multi-value as a list of strings, in order, each once.

    Accepts a list, a JSON array or object (object values are used), or a
    loose comma-separated string such as '{ "1", "5" }' or '"1","5"'.
    Malformed input gives whatever fragments it holds, never an error.
    """
    if raw is None or raw == '':
        return []
    value = raw
    if isinstance(raw, str):
        try:
            value = json.loads(raw)
        except ValueError:
            value = raw.strip().strip('{}[]').split(',')
    if isinstance(value, dict):
        value = list(value.values())
    if not isinstance(value, (list, tuple, set)):
        value = [value]

    items = []
    for item in value:
        item = str(item).strip().strip('"\'').strip()
        if item and item not in items:
            items.append(item)
    return items


def _stringify(value):
    if value is None:
        return ''
    if isinstance(value, bool):
        return '1' if value else '0'
    return str(value)


def _assign(record, name, value):
    setter = getattr(record, 'set_field', None)
    if callable(setter):
        setter(name, value)
    else:
        setattr(record, name, value)


def _read(record, name):
    """
    Read a value from a record. A get_<name>() method wins over the plain
    attribute so that records can supply read-time defaults.
    """
    getter = getattr(record, f'get_{name}', None)
    if callable(getter):
        return getter()
    return getattr(record, name, None)


class FormField:
    """Base class for all fields: a named, titled value"""

    field_type = 'text'
    has_data = True

    def __init__(self, name, title=None, value=None):
        self.name = name
        self.title = name if title is None else title
        self.value = value
        self.extra_classes = []
        self.disabled = False
        self.readonly = False
        self.description = None

    def __repr__(self):
        return f'<{type(self).__name__} {self.name!r}>'

    def add_extra_class(self, css_class):
        if css_class not in self.extra_classes:
            self.extra_classes.append(css_class)
        return self

    def set_value(self, value):
        self.value = value
        return self

    def set_disabled(self, disabled=True):
        self.disabled = disabled
        return self

    def set_readonly(self, readonly=True):
        self.readonly = readonly
        return self

    def set_description(self, description):
        self.description = description
        return self

    def css_classes(self):
        return ' '.join(['field', self.field_type] + self.extra_classes)

    def load_from(self, record):
        if self.has_data and record is not None:
            self.value = _read(record, self.name)

    def value_from(self, data):
        """Extract this field's submitted value, or None when it was not submitted"""
        if self.name not in data:
            return None
        return data.get(self.name)

    def save_into(self, record, data):
        if not self.has_data or self.disabled or self.readonly:
            return
        value = self.value_from(data)
        if value is None:
            return
        self.value = value
        _assign(record, self.name, value)

    def _input_attributes(self):
        attributes = ''
        if self.disabled:
            attributes += ' disabled'
        if self.readonly:
            attributes += ' readonly'
        return attributes

    def render_input(self):
        return Markup(
            f'<input type="{self.field_type}" name="{escape(self.name)}" id="{escape(self.name)}" '
            f'value="{escape(_stringify(self.value))}"{self._input_attributes()}>'
        )

    def render(self):
        description = ''
        if self.description:
            description = f'<p class="description">{escape(self.description)}</p>'
        return Markup(
            f'<div class="{escape(self.css_classes())}" id="{escape(self.name)}_Holder">'
            f'<label for="{escape(self.name)}">{escape(self.title)}</label>'
            f'{self.render_input()}{description}</div>'
        )

    def __html__(self):
        return self.render()

    def to_dict(self):
        return {
            'type': self.field_type,
            'name': self.name,
            'title': self.title,
            'value': self.value,
            'disabled': self.disabled,
            'readonly': self.readonly,
            'extra_classes': list(self.extra_classes),
        }


class TextField(FormField):
    field_type = 'text'


class EmailField(FormField):
    field_type = 'email'


class HiddenField(FormField):
    field_type = 'hidden'

    def render(self):
        return self.render_input()


class HtmlEditorField(FormField):
    """Rich-text field; the editor widget hooks onto the 'htmleditor' class"""

    field_type = 'htmleditor'

    def render_input(self):
        return Markup(
            f'<textarea name="{escape(self.name)}" id="{escape(self.name)}" class="htmleditor" '
            f'rows="15"{self._input_attributes()}>{escape(_stringify(self.value))}</textarea>'
        )


class CheckboxField(FormField):
    field_type = 'checkbox'

    def value_from(self, data):
        # An unchecked box is simply absent from the submission
        return data.get(self.name) not in (None, '', '0', 'false', 'off')

    def render_input(self):
        checked = ' checked' if self.value else ''
        return Markup(
            f'<input type="checkbox" name="{escape(self.name)}" id="{escape(self.name)}" '
            f'value="1"{checked}{self._input_attributes()}>'
        )


class HeaderField(FormField):
    field_type = 'header'
    has_data = False

    def __init__(self, name, title=None, heading_level=2):
        super().__init__(name, title)
        self.heading_level = heading_level

    def render(self):
        level = self.heading_level
        return Markup(f'<h{level} id="{escape(self.name)}">{escape(self.title)}</h{level}>')

    def to_dict(self):
        d = super().to_dict()
        d['heading_level'] = self.heading_level
        return d


class LiteralField(FormField):
    """Raw HTML content; the caller is responsible for escaping"""

    field_type = 'literal'
    has_data = False

    def __init__(self, name, content):
        super().__init__(name, title='')
        self.content = content

    def render(self):
        return Markup(self.content)

    def to_dict(self):
        d = super().to_dict()
        d['content'] = str(self.content)
        return d


class CheckboxSetField(FormField):
    """
    Multiple checkboxes from a source mapping of option value -> label.
    The value is a list of checked option values. Stored on the record as a
    JSON array of strings.
    """

    field_type = 'checkboxset'

    def __init__(self, name, title=None, source=None, value=None):
        super().__init__(name, title)
        self.source = {str(k): v for k, v in (source or {}).items()}
        self.value = self._normalise(value)

    @staticmethod
    def _normalise(value):
        return parse_value_list(value)

    def set_value(self, value):
        self.value = self._normalise(value)
        return self

    def load_from(self, record):
        if record is not None:
            self.value = self._normalise(_read(record, self.name))

    def value_from(self, data):
        return [v for v in get_list(data, self.name) if v in self.source]

    def save_into(self, record, data):
        if self.disabled or self.readonly:
            return
        self.value = self.value_from(data)
        _assign(record, self.name, json.dumps(self.value))

    def options(self):
        return [
            {'value': key, 'title': label, 'checked': key in self.value}
            for key, label in self.source.items()
        ]

    def render_input(self):
        items = []
        for option in self.options():
            option_id = f'{self.name}_{option["value"]}'
            checked = ' checked' if option['checked'] else ''
            items.append(
                f'<li><input type="checkbox" name="{escape(self.name)}" id="{escape(option_id)}" '
                f'value="{escape(option["value"])}"{checked}{self._input_attributes()}>'
                f'<label for="{escape(option_id)}">{escape(option["title"])}</label></li>'
            )
        return Markup(f'<ul class="optionset checkboxset">{"".join(items)}</ul>')

    def to_dict(self):
        d = super().to_dict()
        d['options'] = self.options()
        return d


class CompositeField(FormField):
    """Groups child fields; has no value of its own"""

    field_type = 'composite'
    has_data = False

    def __init__(self, *children, name=None, title=None):
        super().__init__(name or '', title or '')
        self.children = FieldList(*children)
        self.hidden = False

    def push(self, field):
        self.children.push(field)
        return field

    def set_hidden(self, hidden=True):
        self.hidden = hidden
        return self

    def load_from(self, record):
        self.children.load_from(record)

    def save_into(self, record, data):
        self.children.save_into(record, data)

    def render(self):
        style = ' style="display: none"' if self.hidden else ''
        return Markup(
            f'<div class="{escape(self.css_classes())}"{style}>{self.children.render()}</div>'
        )

    def to_dict(self):
        d = super().to_dict()
        d['hidden'] = self.hidden
        d['children'] = self.children.to_dict()
        return d


class Tab(CompositeField):
    field_type = 'tab'

    def __init__(self, name, title=None, *children):
        super().__init__(*children, name=name, title=title or name)

    def render(self):
        return Markup(
            f'<div class="tab" id="Tab_{escape(self.name)}" data-title="{escape(self.title)}">'
            f'{self.children.render()}</div>'
        )


class TabSet(CompositeField):
    field_type = 'tabset'

    def __init__(self, name, *tabs):
        super().__init__(*tabs, name=name, title=name)

    def render(self):
        nav = ''.join(
            f'<li><a href="#Tab_{escape(tab.name)}">{escape(tab.title)}</a></li>'
            for tab in self.children
        )
        return Markup(
            f'<div class="tabset" id="{escape(self.name)}"><ul class="tabs">{nav}</ul>'
            f'{self.children.render()}</div>'
        )


class FieldList:
    """Ordered collection of form fields, possibly nested in tabs and composites"""

    def __init__(self, *fields):
        self._fields = list(fields)

    def __iter__(self):
        return iter(self._fields)

    def __len__(self):
        return len(self._fields)

    def __getitem__(self, index):
        return self._fields[index]

    def __contains__(self, name):
        return self.field_by_name(name) is not None

    def push(self, field):
        self._fields.append(field)
        return field

    add = push

    def remove_by_name(self, name):
        for field in list(self._fields):
            if field.name == name:
                self._fields.remove(field)
                return True
            if isinstance(field, CompositeField) and field.children.remove_by_name(name):
                return True
        return False

    def names(self):
        return [field.name for field in self._fields]

    def field_by_name(self, name):
        """
        Find a field anywhere in the tree. A dotted name ('Root.Main') walks
        containers from the top level.
        """
        if '.' in name:
            head, rest = name.split('.', 1)
            container = self._direct(head)
            if isinstance(container, CompositeField):
                return container.children.field_by_name(rest)
            return None
        for field in self._fields:
            if field.name == name:
                return field
            if isinstance(field, CompositeField):
                found = field.children.field_by_name(name)
                if found is not None:
                    return found
        return None

    def _direct(self, name):
        return next((f for f in self._fields if f.name == name), None)

    def data_fields(self):
        """Map of name -> field for every value-carrying field, in form order"""
        result = {}
        for field in self._fields:
            if isinstance(field, CompositeField):
                result.update(field.children.data_fields())
            elif field.has_data:
                result[field.name] = field
        return result

    def find_or_make_tab(self, path):
        """Return the container at path ('Root' or 'Root.Main'), creating it when missing"""
        parts = path.split('.')
        tabset = self._direct(parts[0])
        if tabset is None:
            tabset = self.push(TabSet(parts[0]))
        container = tabset
        for part in parts[1:]:
            child = container.children._direct(part)
            if child is None:
                child = container.push(Tab(part))
            container = child
        return container

    def add_field_to_tab(self, path, field):
        self.find_or_make_tab(path).push(field)
        return field

    def load_from(self, record):
        for field in self._fields:
            field.load_from(record)

    def save_into(self, record, data):
        for field in self._fields:
            field.save_into(record, data)

    def render(self):
        return Markup(''.join(str(field.render()) for field in self._fields))

    def to_dict(self):
        return [field.to_dict() for field in self._fields]

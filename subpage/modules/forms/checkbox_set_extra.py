"""
Checkbox Set With Extra Field
=============================

A checkbox set where every option row also carries a few extra attributes,
e.g. for the subscription form's field selection:

    | [x] | Email      | custom label | validation message | [x] required |
    | [ ] | First name | custom label | validation message | [ ] required |

The selected options are stored comma-separated, in the order the rows were
submitted. Each extra attribute is stored as a flat JSON object keyed by
option name, holding only selected rows, e.g. {"Email":"1","Surname":"1"}.
"""

import json
from markupsafe import Markup, escape

from .fields import FormField, _assign, _read, get_list

EXTRA_TYPES = ('Varchar', 'Boolean')


def parse_extra_value(raw):
    """Decode a stored extra attribute; malformed or empty storage gives {}"""
    if isinstance(raw, dict):
        return dict(raw)
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except (ValueError, TypeError):
        return {}
    if not isinstance(value, dict):
        return {}
    return {str(k): v for k, v in value.items()}


def _truthy(value):
    return str(value).strip().lower() not in ('', '0', 'false', 'off', 'none')


class CheckboxSetWithExtraField(FormField):

    field_type = 'checkboxsetwithextra'

    def __init__(self, name, title=None, source=None, value=None, extra=None, extra_value=None):
        """
        Args:
            name: record attribute holding the comma-separated selection
            title: field label
            source: mapping of option name -> display label, in display order
            value: list of selected option names
            extra: mapping of extra attribute -> type ('Varchar' or 'Boolean');
                   each attribute is also a record attribute
            extra_value: mapping of extra attribute -> stored JSON-like string
        """
        super().__init__(name, title)
        self.source = dict(source or {})
        self.value = list(value or [])
        self.extra = dict(extra or {})
        for attr, attr_type in self.extra.items():
            if attr_type not in EXTRA_TYPES:
                raise ValueError(f"Unsupported extra field type {attr_type!r} for {attr!r}")
        self.extra_value = {attr: parse_extra_value((extra_value or {}).get(attr)) for attr in self.extra}
        self.cell_disabled = {}

    def set_cell_disabled(self, cells):
        """
        Lock cells of given rows, e.g. {'Email': ['value', 'required']}.
        A locked 'value' keeps the row selected; a locked Boolean keeps it on.
        """
        for option, names in cells.items():
            self.cell_disabled.setdefault(option, set()).update(names)
        return self

    def is_cell_disabled(self, option, cell):
        return cell in self.cell_disabled.get(option, ())

    def _locked_selection(self):
        return [option for option in self.source if self.is_cell_disabled(option, 'value')]

    def selected(self):
        """Selected option names, locked rows included"""
        names = [n for n in self.value if n in self.source]
        for option in self._locked_selection():
            if option not in names:
                names.insert(0, option)
        return names

    def _cell_value(self, option, attr):
        if self.extra[attr] == 'Boolean' and self.is_cell_disabled(option, attr):
            return '1'
        return self.extra_value[attr].get(option, '')

    def rows(self):
        """One dict per option: name, label, checked and its extra cells"""
        selected = self.selected()
        rows = []
        for option, label in self.source.items():
            rows.append({
                'name': option,
                'label': label,
                'checked': option in selected,
                'disabled': self.is_cell_disabled(option, 'value'),
                'extra': {
                    attr: {
                        'type': attr_type,
                        'value': self._cell_value(option, attr),
                        'disabled': self.is_cell_disabled(option, attr),
                    }
                    for attr, attr_type in self.extra.items()
                },
            })
        return rows

    def extra_input_name(self, attr, option):
        return f'{self.name}[{attr}][{option}]'

    def load_from(self, record):
        if record is None:
            return
        raw = getattr(record, self.name, None) or ''
        self.value = [n.strip() for n in str(raw).split(',') if n.strip()]
        for attr in self.extra:
            self.extra_value[attr] = parse_extra_value(_read(record, attr))

    def value_from(self, data):
        names = []
        for option in get_list(data, self.name):
            if option in self.source and option not in names:
                names.append(option)
        for option in self._locked_selection():
            if option not in names:
                names.insert(0, option)
        return names

    def extra_from(self, data, selected):
        values = {}
        for attr, attr_type in self.extra.items():
            attr_values = {}
            for option in selected:
                if attr_type == 'Boolean':
                    submitted = data.get(self.extra_input_name(attr, option))
                    if self.is_cell_disabled(option, attr) or (submitted is not None and _truthy(submitted)):
                        attr_values[option] = '1'
                else:
                    submitted = (data.get(self.extra_input_name(attr, option)) or '').strip()
                    if submitted:
                        attr_values[option] = submitted
            values[attr] = attr_values
        return values

    def save_into(self, record, data):
        # Not part of the submission: keep the stored selection and extras
        if self.disabled or self.readonly or self.name not in data:
            return
        selected = self.value_from(data)
        extra_values = self.extra_from(data, selected)
        self.value = selected
        self.extra_value = extra_values
        _assign(record, self.name, ','.join(selected))
        for attr, attr_values in extra_values.items():
            _assign(record, attr, json.dumps(attr_values, separators=(',', ':'), ensure_ascii=False))

    def render_input(self):
        header = ''.join(f'<th>{escape(attr.replace("_", " ").title())}</th>' for attr in self.extra)
        body = []
        for row in self.rows():
            option = row['name']
            checked = ' checked' if row['checked'] else ''
            # a disabled checkbox is not submitted; locked rows are re-added on save
            disabled = ' disabled' if row['disabled'] else ''
            cells = [
                f'<td><input type="checkbox" name="{escape(self.name)}" value="{escape(option)}"{checked}{disabled}></td>',
                f'<td>{escape(row["label"])}</td>',
            ]
            for attr, cell in row['extra'].items():
                input_name = escape(self.extra_input_name(attr, option))
                cell_disabled = ' disabled' if cell['disabled'] else ''
                if cell['type'] == 'Boolean':
                    on = ' checked' if _truthy(cell['value']) else ''
                    cells.append(f'<td><input type="checkbox" name="{input_name}" value="1"{on}{cell_disabled}></td>')
                else:
                    cells.append(
                        f'<td><input type="text" name="{input_name}" value="{escape(cell["value"])}"{cell_disabled}></td>'
                    )
            body.append(f'<tr data-option="{escape(option)}">{"".join(cells)}</tr>')
        # the empty entry marks the set as submitted when every box is unchecked
        return Markup(
            f'<input type="hidden" name="{escape(self.name)}" value="">'
            f'<table class="checkboxsetwithextra"><thead><tr><th></th><th></th>{header}</tr></thead>'
            f'<tbody>{"".join(body)}</tbody></table>'
        )

    def to_dict(self):
        d = super().to_dict()
        d['value'] = self.selected()
        d['rows'] = self.rows()
        return d

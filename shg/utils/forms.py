"""Form base classes for JSON request bodies"""
from dateutil import parser as date_parser
from flask import request
from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import DateField


def json_formdata(payload, prefix=''):
    """Flatten a JSON object into form data WTForms understands.

    Nested lists of objects become ``name-0-field`` keys so they bind to a
    ``FieldList(FormField(...))``; booleans become ``'true'``/``'false'`` and
    nulls are left out.
    """
    data = MultiDict()
    for key, value in (payload or {}).items():
        name = f'{prefix}{key}'
        if value is None:
            continue
        if isinstance(value, dict):
            for sub_key, sub_value in json_formdata(value, f'{name}-').items(multi=True):
                data.add(sub_key, sub_value)
        elif isinstance(value, list):
            for index, item in enumerate(value):
                if isinstance(item, dict):
                    for sub_key, sub_value in json_formdata(item, f'{name}-{index}-').items(multi=True):
                        data.add(sub_key, sub_value)
                elif item is not None:
                    data.add(name, _scalar(item))
        else:
            data.add(name, _scalar(value))
    return data


def _scalar(value):
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


class ApiForm(FlaskForm):
    """FlaskForm bound to the JSON body of the current request"""

    class Meta:
        csrf = False

    @classmethod
    def from_json(cls, payload=None, **kwargs):
        if payload is None:
            payload = request.get_json(silent=True) or {}
        return cls(formdata=json_formdata(payload), **kwargs)


class IsoDateField(DateField):
    """Date field accepting ``2024-01-31`` as well as full ISO datetimes.

    Any time-of-day is dropped.
    """

    def process_formdata(self, valuelist):
        if not valuelist:
            return
        raw = ' '.join(valuelist).strip()
        if not raw:
            self.data = None
            return
        try:
            self.data = date_parser.isoparse(raw).date()
        except (ValueError, OverflowError):
            self.data = None
            raise ValueError(self.gettext('Not a valid date value.'))

from flask import request
from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms.validators import ValidationError as FieldError
from taskflow.errors import ValidationError


class JsonForm(FlaskForm):
    """WTForms validation for JSON bodies

    CSRF is checked once per request by CSRFProtect (X-CSRFToken header),
    so the form itself carries no token field.
    """
    class Meta:
        csrf = False


def not_blank(form, field):
    if field.raw_data and not (field.data or '').strip():
        raise FieldError('This field cannot be blank.')


def _as_form_value(value):
    # BooleanField only treats lowercase 'false' as false
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def get_json():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def validate_json(form_class, data=None, **kwargs):
    """
    Validate a JSON body with a WTForms form

    Nulls and nested values are left out of the form data; callers look at
    the raw ``data`` dict for those. Returns ``(form, data)``.
    """
    if data is None:
        data = get_json()
    formdata = MultiDict([
        (key, _as_form_value(value)) for key, value in data.items()
        if value is not None and not isinstance(value, (list, dict))
    ])
    form = form_class(formdata=formdata, **kwargs)
    if not form.validate():
        field_name, messages = next(iter(form.errors.items()))
        label = getattr(form, field_name).label.text if hasattr(form, field_name) else field_name
        raise ValidationError(f'{label}: {messages[0]}')
    return form, data

"""Member forms"""
from wtforms import StringField, PasswordField, SelectField, BooleanField
from wtforms.validators import DataRequired, Email, Length, Optional
from shg.models import Role
from shg.utils.forms import ApiForm, IsoDateField

def _lower(value):
    return value.strip().lower() if isinstance(value, str) else value

class MemberForm(ApiForm):
    """Member create/update form"""
    name = StringField('Name', validators=[DataRequired(), Length(max=200)])
    address = StringField('Address', validators=[Optional(), Length(max=255)])
    email = StringField('Email', validators=[DataRequired(), Email(), Length(max=120)])
    phone = StringField('Phone', validators=[Optional(), Length(max=20)])
    role = SelectField('Role', choices=Role.choices(), default=Role.MEMBER.value,
                       filters=[_lower], validators=[Optional()])
    joining_date = IsoDateField('Joining Date', validators=[Optional()])
    inactive_date = IsoDateField('Inactive Date', validators=[Optional()])
    is_active = BooleanField('Active')
    password = PasswordField('Password', validators=[
        Optional(),
        Length(min=6, message='Password must be at least 6 characters long')
    ])

    def active_flag(self, default=True):
        """``is_active`` from the body, or ``default`` when it was not sent"""
        return self.is_active.data if self.is_active.raw_data else default

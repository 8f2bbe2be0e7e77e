"""Loan request forms"""
from wtforms import StringField, TextAreaField, DecimalField, IntegerField, SelectField
from wtforms.validators import DataRequired, InputRequired, Optional, NumberRange, Length, ValidationError
from datetime import date
from shg.utils.forms import ApiForm, IsoDateField

class LoanRequestForm(ApiForm):
    """Loan application by a member"""
    loan_type_id = IntegerField('Loan Type', validators=[Optional()])
    amount = DecimalField('Amount', places=2, validators=[
        InputRequired(), NumberRange(min=0, message='Amount cannot be negative')
    ])
    due_date = IsoDateField('Due Date', validators=[DataRequired()])
    loan_term = IntegerField('Term (Months)', validators=[Optional(), NumberRange(min=1, max=360)])
    description = TextAreaField('Description', validators=[Optional()])
    cheque_number = StringField('Cheque Number', validators=[Optional(), Length(max=50)])

    def validate_due_date(self, field):
        if field.data and field.data < date.today():
            raise ValidationError('Due date cannot be in the past')

class LoanRequestActionForm(ApiForm):
    """Accept or reject a loan request"""
    action = SelectField('Action', choices=[
        ('accepted', 'Accept'),
        ('rejected', 'Reject'),
    ], filters=[lambda value: value.strip().lower() if isinstance(value, str) else value],
       validators=[DataRequired()])

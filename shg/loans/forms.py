"""Loan forms"""
from wtforms import StringField, DecimalField, IntegerField, SelectField
from wtforms.validators import DataRequired, InputRequired, Optional, NumberRange, Length, ValidationError
from shg.models import Loan
from shg.utils.forms import ApiForm, IsoDateField

class LoanTypeForm(ApiForm):
    """Loan type form"""
    name = StringField('Loan Type', validators=[DataRequired(), Length(max=100)])
    interest_rate = DecimalField('Monthly Interest Rate (%)', places=2, validators=[
        InputRequired(), NumberRange(min=0, max=100)
    ])

class LoanForm(ApiForm):
    """Loan form"""
    user_id = IntegerField('Member', validators=[InputRequired()])
    loan_type_id = IntegerField('Loan Type', validators=[Optional()])
    amount = DecimalField('Loan Amount', places=2, validators=[
        InputRequired(), NumberRange(min=0, message='Loan amount cannot be negative')
    ])
    interest_rate = DecimalField('Monthly Interest Rate (%)', places=2, validators=[
        Optional(), NumberRange(min=0, max=100)
    ])
    date = IsoDateField('Issue Date', validators=[DataRequired()])
    due_date = IsoDateField('Due Date', validators=[DataRequired()])
    loan_term = IntegerField('Term (Months)', validators=[Optional(), NumberRange(min=1, max=360)])
    cheque_number = StringField('Cheque Number', validators=[Optional(), Length(max=50)])
    status = SelectField('Status', choices=[
        (Loan.STATUS_ACTIVE, 'Active'),
        (Loan.STATUS_SANCTIONED, 'Sanctioned'),
        (Loan.STATUS_CLOSED, 'Closed'),
    ], default=Loan.STATUS_ACTIVE, validators=[Optional()])

    def validate_due_date(self, field):
        if self.date.data and field.data and field.data < self.date.data:
            raise ValidationError('Due date cannot be before the issue date')

class RepaymentForm(ApiForm):
    """Loan repayment form"""
    loan_id = IntegerField('Loan', validators=[InputRequired()])
    closed_date = IsoDateField('Closed Date', validators=[Optional()])
    interest_received = DecimalField('Interest Received', places=2, validators=[
        Optional(), NumberRange(min=0, message='Interest received cannot be negative')
    ])

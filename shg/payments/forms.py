"""Meeting payment forms"""
from wtforms import Form, IntegerField, DecimalField, FieldList, FormField
from wtforms.validators import InputRequired, NumberRange
from shg.utils.forms import ApiForm

class PaymentForm(ApiForm):
    """Savings paid by one member at one meeting"""
    user_id = IntegerField('Member', validators=[InputRequired()])
    meeting_id = IntegerField('Meeting', validators=[InputRequired()])
    main_payment = DecimalField('Main Payment', places=2, validators=[
        InputRequired(), NumberRange(min=0, message='Main payment cannot be negative')
    ])
    weekly_payment = DecimalField('Weekly Payment', places=2, validators=[
        InputRequired(), NumberRange(min=0, message='Weekly payment cannot be negative')
    ])

class PaymentEntryForm(Form):
    user_id = IntegerField('Member', validators=[InputRequired()])
    main_payment = DecimalField('Main Payment', places=2, validators=[
        InputRequired(), NumberRange(min=0, message='Main payment cannot be negative')
    ])
    weekly_payment = DecimalField('Weekly Payment', places=2, validators=[
        InputRequired(), NumberRange(min=0, message='Weekly payment cannot be negative')
    ])

class BulkPaymentForm(ApiForm):
    """Every payment of one meeting"""
    meeting_id = IntegerField('Meeting', validators=[InputRequired()])
    payments = FieldList(FormField(PaymentEntryForm), min_entries=0)

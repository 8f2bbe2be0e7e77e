"""Attendance forms"""
from wtforms import Form, IntegerField, BooleanField, FieldList, FormField
from wtforms.validators import InputRequired
from shg.utils.forms import ApiForm

class AttendanceForm(ApiForm):
    """Single attendance record"""
    user_id = IntegerField('Member', validators=[InputRequired()])
    meeting_id = IntegerField('Meeting', validators=[InputRequired()])
    is_present = BooleanField('Present')

class AttendanceEntryForm(Form):
    user_id = IntegerField('Member', validators=[InputRequired()])
    is_present = BooleanField('Present')

class BulkAttendanceForm(ApiForm):
    """Every attendance record for one meeting"""
    meeting_id = IntegerField('Meeting', validators=[InputRequired()])
    attendances = FieldList(FormField(AttendanceEntryForm), min_entries=0)

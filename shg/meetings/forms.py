"""Meeting forms"""
from wtforms import StringField, TextAreaField, IntegerField
from wtforms.validators import DataRequired, InputRequired, Length, Optional
from shg.utils.forms import ApiForm, IsoDateField

class MeetingForm(ApiForm):
    """Meeting form"""
    date = IsoDateField('Date', validators=[DataRequired()])
    time = StringField('Time', validators=[Optional(), Length(max=20)])
    description = StringField('Description', validators=[DataRequired(), Length(max=255)])
    location = StringField('Location', validators=[Optional(), Length(max=255)])

class MeetingMinutesForm(ApiForm):
    """Meeting minutes form"""
    meeting_id = IntegerField('Meeting', validators=[InputRequired()])
    minutes = TextAreaField('Minutes', validators=[Optional()])

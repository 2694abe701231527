# enrollment/forms/enrollment.py
import math
import re
from datetime import datetime, timedelta, timezone

from werkzeug.datastructures import MultiDict
from wtforms import Form, StringField
from wtforms.validators import AnyOf, DataRequired, Email, Length, ValidationError

from enrollment_intake.models.enrollment import COURSE_CATALOG

# Submitted field name -> form attribute, in the order errors are reported
WIRE_FIELDS = {
    'firstName': 'first_name',
    'lastName': 'last_name',
    'email': 'email',
    'phone': 'phone',
    'idnumber': 'idnumber',
    'dateOfBirth': 'date_of_birth',
    'course': 'course',
    'address': 'address',
    'city': 'city',
    'zipCode': 'zip_code',
    'emergencyContact': 'emergency_contact',
    'emergencyPhone': 'emergency_phone'
}

MIN_AGE = 16
MAX_AGE = 100
YEAR = timedelta(days=365.25)

_MARKUP_CHARS = re.compile(r'[<>"\']')
_WHITESPACE = re.compile(r'\s')
_PHONE_PATTERN = re.compile(r'^[\d\s\-+()]{10,}$')


def sanitize_input(value):
    """Drop markup characters and surrounding whitespace from submitted text."""
    if isinstance(value, str):
        return _MARKUP_CHARS.sub('', value).strip()
    return value


def lowercase(value):
    return value.lower() if isinstance(value, str) else value


def required(wire_name):
    return DataRequired(message=f'{wire_name} is required')


def max_length(wire_name, limit):
    return Length(max=limit, message=f'{wire_name} cannot exceed {limit} characters')


class PhoneNumber:
    """Ten or more characters made of digits, spaces, '-', '+', '(' and ')'."""

    def __init__(self, message='Please provide a valid phone number'):
        self.message = message

    def __call__(self, form, field):
        if field.data and not _PHONE_PATTERN.match(_WHITESPACE.sub('', field.data)):
            raise ValidationError(self.message)


def calculate_age(birth_date, now):
    """Whole years between birth_date (midnight UTC) and now, using 365.25-day years."""
    born = datetime(birth_date.year, birth_date.month, birth_date.day, tzinfo=timezone.utc)
    return math.floor((now - born) / YEAR)


def parse_birth_date(value):
    """Accept plain ISO dates as well as full ISO timestamps."""
    parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date()


class EnrollmentForm(Form):
    """Enrollment application form - matches the public /send endpoint."""

    # Personal Information
    first_name = StringField('First Name', filters=[sanitize_input], validators=[
        required('firstName'),
        max_length('firstName', 50)
    ])

    last_name = StringField('Last Name', filters=[sanitize_input], validators=[
        required('lastName'),
        max_length('lastName', 50)
    ])

    # Contact Information
    email = StringField('Email Address', filters=[sanitize_input, lowercase], validators=[
        required('email'),
        Email(message='Please provide a valid email address'),
        max_length('email', 255)
    ])

    phone = StringField('Phone Number', filters=[sanitize_input], validators=[
        required('phone'),
        PhoneNumber(),
        max_length('phone', 30)
    ])

    idnumber = StringField('ID Number', filters=[sanitize_input], validators=[
        required('idnumber'),
        max_length('idnumber', 50)
    ])

    date_of_birth = StringField('Date of Birth', filters=[sanitize_input], validators=[
        required('dateOfBirth')
    ])

    # Course selection
    course = StringField('Course', filters=[sanitize_input], validators=[
        required('course'),
        AnyOf(COURSE_CATALOG, message='Please select a valid course')
    ])

    # Address
    address = StringField('Address', filters=[sanitize_input], validators=[
        required('address'),
        max_length('address', 255)
    ])

    city = StringField('City', filters=[sanitize_input], validators=[
        required('city'),
        max_length('city', 100)
    ])

    zip_code = StringField('ZIP Code', filters=[sanitize_input], validators=[
        required('zipCode'),
        max_length('zipCode', 20)
    ])

    # Emergency contact
    emergency_contact = StringField('Emergency Contact Name', filters=[sanitize_input], validators=[
        required('emergencyContact'),
        max_length('emergencyContact', 100)
    ])

    emergency_phone = StringField('Emergency Contact Phone', filters=[sanitize_input], validators=[
        required('emergencyPhone'),
        PhoneNumber(message='Please provide a valid emergency phone number'),
        max_length('emergencyPhone', 30)
    ])

    def __init__(self, formdata=None, reference_time=None, **kwargs):
        super().__init__(formdata, **kwargs)
        self.reference_time = reference_time or datetime.now(timezone.utc)
        self.birth_date = None

    def validate_date_of_birth(self, field):
        """Birth date must parse and put the applicant between 16 and 100 years old."""
        try:
            birth_date = parse_birth_date(field.data)
        except ValueError:
            raise ValidationError('Please provide a valid date of birth')

        age = calculate_age(birth_date, self.reference_time)
        if age < MIN_AGE or age > MAX_AGE:
            raise ValidationError(f'Age must be between {MIN_AGE} and {MAX_AGE} years')

        self.birth_date = birth_date

    def collected_errors(self):
        """Every field error, in form order."""
        errors = []
        for field in self:
            errors.extend(field.errors)
        return errors

    def cleaned_data(self):
        """Normalized record candidate; only meaningful after a successful validate()."""
        data = {attribute: getattr(self, attribute).data for attribute in WIRE_FIELDS.values()}
        data['date_of_birth'] = self.birth_date
        return data


def build_formdata(raw):
    """Map submitted wire names onto form attributes, coercing values to text."""
    formdata = MultiDict()
    for wire_name, attribute in WIRE_FIELDS.items():
        value = raw.get(wire_name)
        if value is None:
            continue
        formdata[attribute] = value if isinstance(value, str) else str(value)
    return formdata


def validate_submission(raw, now=None):
    """
    Validate and normalize a raw enrollment submission.

    Args:
        raw: Mapping of submitted field names (firstName, email, ...) to values
        now: Reference time for the age check, defaults to the current UTC time

    Returns:
        tuple: (record candidate dict or None, list of error messages)
    """
    form = EnrollmentForm(build_formdata(raw), reference_time=now)

    if not form.validate():
        return None, form.collected_errors()

    return form.cleaned_data(), []

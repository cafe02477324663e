# emergency_id/schemas.py
from datetime import date

from marshmallow import EXCLUDE, Schema, ValidationError, fields, pre_load, validate, validates

from .models import ROLES, ROLE_PATIENT

BLOOD_TYPES = ["A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-"]


class _Lenient(Schema):
    class Meta:
        unknown = EXCLUDE


def _strip(value):
    return value.strip() if isinstance(value, str) else value


class RegisterSchema(_Lenient):
    email = fields.Email(required=True)
    password = fields.String(required=True)
    role = fields.String(load_default=ROLE_PATIENT, validate=validate.OneOf(ROLES))
    doctor_code = fields.String(data_key="doctorCode", load_default=None, allow_none=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "email" in data:
            data["email"] = _strip(data["email"])
        # older clients send the doctor code as "secretCode"
        if "doctorCode" not in data and "secretCode" in data:
            data["doctorCode"] = data.pop("secretCode")
        if data.get("role") in ("", None):
            data.pop("role", None)
        return data


class LoginSchema(_Lenient):
    email = fields.String(required=True, validate=validate.Length(min=1))
    password = fields.String(required=True, validate=validate.Length(min=1))


class PersonalInfoSchema(_Lenient):
    firstName = fields.String(required=True, validate=validate.Length(min=1, max=100))
    lastName = fields.String(required=True, validate=validate.Length(min=1, max=100))
    dateOfBirth = fields.Date(required=True)
    bloodType = fields.String(required=True, validate=validate.OneOf(BLOOD_TYPES))

    @pre_load
    def strip_names(self, data, **kwargs):
        if isinstance(data, dict):
            data = {k: _strip(v) for k, v in data.items()}
        return data

    @validates("dateOfBirth")
    def not_in_future(self, value, **kwargs):
        if value > date.today():
            raise ValidationError("Date of birth cannot be in the future.")


class MedicalInfoSchema(_Lenient):
    allergies = fields.List(fields.String(validate=validate.Length(min=1)), load_default=list)
    conditions = fields.List(fields.String(validate=validate.Length(min=1)), load_default=list)
    medications = fields.List(fields.String(validate=validate.Length(min=1)), load_default=list)

    @pre_load
    def split_strings(self, data, **kwargs):
        """Accept comma-separated strings as well as lists; drop blanks."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("allergies", "conditions", "medications"):
            value = data.get(key)
            if isinstance(value, str):
                value = value.split(",")
            if isinstance(value, list):
                data[key] = [v.strip() if isinstance(v, str) else v for v in value
                             if not (isinstance(v, str) and not v.strip())]
        return data


class EmergencyContactSchema(_Lenient):
    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    phone = fields.String(required=True, validate=validate.Length(min=3, max=32))
    relationship = fields.String(load_default=None, allow_none=True)

    @pre_load
    def strip_values(self, data, **kwargs):
        if isinstance(data, dict):
            data = {k: _strip(v) for k, v in data.items()}
        return data


class ProfileInSchema(_Lenient):
    personalInfo = fields.Nested(PersonalInfoSchema, required=True)
    medicalInfo = fields.Nested(MedicalInfoSchema, load_default=dict)
    emergencyContact = fields.Nested(EmergencyContactSchema, required=True)


class QrResolveSchema(_Lenient):
    qrData = fields.String(required=True, validate=validate.Length(min=1))

import datetime

import django_filters
from django_filters.constants import EMPTY_VALUES
from django import forms
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime


class DateOrDateTimeField(forms.Field):
    """Accepts an ISO date or an ISO datetime; cleans to date or aware datetime."""
    default_error_messages = {"invalid": "Enter a valid ISO date or datetime."}

    def to_python(self, value):
        if value in self.empty_values:
            return None
        value = str(value).strip()
        try:
            parsed = parse_date(value) or parse_datetime(value)
        except ValueError:
            parsed = None
        if parsed is None:
            raise forms.ValidationError(self.error_messages["invalid"], code="invalid")
        if isinstance(parsed, datetime.datetime) and timezone.is_naive(parsed):
            parsed = timezone.make_aware(parsed)
        return parsed


class DateOrDateTimeFilter(django_filters.Filter):
    """
    Bound on a datetime column. A bare date compares against the calendar day,
    so to_date=<today> keeps everything from today.
    """
    field_class = DateOrDateTimeField

    def filter(self, qs, value):
        if value in EMPTY_VALUES:
            return qs
        lookup = self.lookup_expr
        if not isinstance(value, datetime.datetime):
            lookup = f"date__{lookup}"
        return self.get_method(qs)(**{f"{self.field_name}__{lookup}": value})

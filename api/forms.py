"""Query-string forms for the API views.

These only coerce types; range and business rules live in the services
so the same rules apply to every caller.
"""

from common.errors import InvalidInputError
from django import forms

from submissions.models import Submission


class QueryForm(forms.Form):
    """Form whose first error becomes an InvalidInputError."""

    def cleaned_or_raise(self):
        if not self.is_valid():
            name, errors = next(iter(self.errors.items()))
            if errors.as_data()[0].code == "required":
                raise InvalidInputError(name, f"Missing {name}")
            raise InvalidInputError(name, f"Invalid {name}")
        return self.cleaned_data


class UploadGrantForm(QueryForm):
    session_id = forms.CharField()
    slot = forms.IntegerField()
    filename = forms.CharField(required=False)
    content_type = forms.CharField(required=False, max_length=100)
    size_bytes = forms.IntegerField(required=False)
    rotation = forms.IntegerField(required=False)


class SubmissionListForm(QueryForm):
    page = forms.IntegerField(required=False, min_value=1)
    limit = forms.IntegerField(required=False)
    status = forms.ChoiceField(required=False, choices=Submission.Status.choices)
    date_from = forms.DateField(required=False, input_formats=["%Y-%m-%d"])
    date_to = forms.DateField(required=False, input_formats=["%Y-%m-%d"])

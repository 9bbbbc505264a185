"""
Validation forms for the submission payload.

The payload is JSON, so these forms are bound to plain dicts. Field
declaration order is the order errors are reported in: the first
failing field wins.
"""

from dataclasses import dataclass, field

from common.errors import InvalidInputError
from django import forms
from django.core.exceptions import NON_FIELD_ERRORS
from django.core.validators import RegexValidator
from django.utils import timezone

from submissions.models import Submission

PREFECTURES = [
    "北海道", "青森県", "岩手県", "宮城県", "秋田県", "山形県", "福島県",
    "茨城県", "栃木県", "群馬県", "埼玉県", "千葉県", "東京都", "神奈川県",
    "新潟県", "富山県", "石川県", "福井県", "山梨県", "長野県",
    "岐阜県", "静岡県", "愛知県", "三重県",
    "滋賀県", "京都府", "大阪府", "兵庫県", "奈良県", "和歌山県",
    "鳥取県", "島根県", "岡山県", "広島県", "山口県",
    "徳島県", "香川県", "愛媛県", "高知県",
    "福岡県", "佐賀県", "長崎県", "熊本県", "大分県", "宮崎県", "鹿児島県", "沖縄県",
]  # fmt: skip

MAX_PHOTOS = 5
DATE_FORMATS = ["%Y-%m-%d"]

kana_validator = RegexValidator(
    r"^[ぁ-ゖァ-ヺー・　 ]+$",
    "Enter kana (hiragana or katakana) only.",
)
phone_validator = RegexValidator(
    r"^0[0-9-]{9,12}$",
    "Enter a phone number such as 090-1234-5678.",
)
postal_code_validator = RegexValidator(
    r"^\d{3}-?\d{4}$",
    "Enter a postal code such as 123-4567.",
)


class SubmissionForm(forms.Form):
    """Top-level work and applicant fields."""

    session_id = forms.CharField(max_length=64)
    work_title = forms.CharField(max_length=200)
    episode = forms.CharField(max_length=4000)
    pen_name = forms.CharField(max_length=100, required=False)
    last_name = forms.CharField(max_length=100)
    first_name = forms.CharField(max_length=100)
    last_name_kana = forms.CharField(max_length=100, validators=[kana_validator])
    first_name_kana = forms.CharField(max_length=100, validators=[kana_validator])
    gender = forms.ChoiceField(choices=Submission.Gender.choices)
    birth_date = forms.DateField(input_formats=DATE_FORMATS)
    agreed_terms = forms.IntegerField()

    def __init__(self, *args, today=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.today = today or timezone.localdate()

    def clean_birth_date(self):
        birth_date = self.cleaned_data["birth_date"]
        if birth_date > self.today:
            raise forms.ValidationError("Birth date cannot be in the future.")
        return birth_date

    def clean_agreed_terms(self):
        agreed = self.cleaned_data["agreed_terms"]
        if agreed != 1:
            raise forms.ValidationError("You must agree to the terms.")
        return agreed


class ContactsForm(forms.Form):
    """The ``contacts`` sub-object."""

    email = forms.EmailField(max_length=254)
    phone = forms.CharField(max_length=20, validators=[phone_validator])
    postal_code = forms.CharField(max_length=8, validators=[postal_code_validator])
    prefecture = forms.ChoiceField(choices=[(p, p) for p in PREFECTURES])
    address_line1 = forms.CharField(max_length=255)
    address_line2 = forms.CharField(max_length=255, required=False)

    def clean_phone(self):
        phone = self.cleaned_data["phone"]
        digits = phone.replace("-", "")
        if not 10 <= len(digits) <= 11:
            raise forms.ValidationError("Enter a phone number such as 090-1234-5678.")
        return phone


class PhotoMetaForm(forms.Form):
    """One entry of the optional ``photos`` override list."""

    sort_order = forms.IntegerField(min_value=0, max_value=MAX_PHOTOS - 1, required=False)
    draft_id = forms.UUIDField(required=False)
    title = forms.CharField(max_length=200, required=False)
    caption = forms.CharField(max_length=2000, required=False)
    shoot_date = forms.DateField(input_formats=DATE_FORMATS, required=False)
    shoot_location = forms.CharField(max_length=200, required=False)


@dataclass
class SubmissionInput:
    """Cleaned commit request."""

    session_id: str
    fields: dict
    photos: list = field(default_factory=list)

    @property
    def references_drafts(self):
        return bool(self.photos) and self.photos[0]["draft_id"] is not None


def _raise_first_error(form, prefix=""):
    name, errors = next(iter(form.errors.items()))
    if name == NON_FIELD_ERRORS:
        name = prefix.rstrip(".") or "body"
    else:
        name = f"{prefix}{name}"
    raise InvalidInputError(name, f"{name}: {errors[0]}")


def _validate_photos(raw_photos):
    if raw_photos is None:
        return []
    if not isinstance(raw_photos, list):
        raise InvalidInputError("photos", "photos: Expected a list.")
    if len(raw_photos) > MAX_PHOTOS:
        raise InvalidInputError("photos", f"Too many photos (max {MAX_PHOTOS})")

    photos = []
    seen_slots = set()
    seen_drafts = set()
    for index, raw in enumerate(raw_photos):
        prefix = f"photos[{index}]."
        if not isinstance(raw, dict):
            raise InvalidInputError(f"photos[{index}]", f"photos[{index}]: Expected an object.")
        form = PhotoMetaForm(data=raw)
        if not form.is_valid():
            _raise_first_error(form, prefix)
        meta = form.cleaned_data

        references = meta["draft_id"] is not None
        if photos and references != (photos[0]["draft_id"] is not None):
            raise InvalidInputError(
                f"{prefix}draft_id",
                f"{prefix}draft_id: Either every photo references a draft or none does.",
            )
        if not references:
            if meta["sort_order"] is None:
                raise InvalidInputError(
                    f"{prefix}sort_order", f"{prefix}sort_order: This field is required."
                )
            if meta["sort_order"] in seen_slots:
                raise InvalidInputError(
                    f"{prefix}sort_order", f"{prefix}sort_order: Duplicate slot."
                )
            seen_slots.add(meta["sort_order"])
        else:
            if meta["draft_id"] in seen_drafts:
                raise InvalidInputError(
                    f"{prefix}draft_id", f"{prefix}draft_id: Duplicate draft."
                )
            seen_drafts.add(meta["draft_id"])
        photos.append(meta)
    return photos


def validate_submission(payload, now=None):
    """Validate a commit payload.

    Args:
        payload: Decoded JSON object.
        now: Optional aware datetime; birth dates after its date are rejected.

    Returns:
        A SubmissionInput.

    Raises:
        InvalidInputError: Naming the first offending field, e.g.
            ``contacts.email`` or ``photos[2].shoot_date``.
    """
    if not isinstance(payload, dict):
        raise InvalidInputError("body", "Expected a JSON object.")

    today = timezone.localdate(now) if now else None
    form = SubmissionForm(data=payload, today=today)
    if not form.is_valid():
        _raise_first_error(form)

    contacts = payload.get("contacts")
    if not isinstance(contacts, dict):
        raise InvalidInputError("contacts", "contacts: This field is required.")
    contacts_form = ContactsForm(data=contacts)
    if not contacts_form.is_valid():
        _raise_first_error(contacts_form, "contacts.")

    photos = _validate_photos(payload.get("photos"))

    fields = dict(form.cleaned_data)
    session_id = fields.pop("session_id")
    fields.update(contacts_form.cleaned_data)
    return SubmissionInput(session_id=session_id, fields=fields, photos=photos)

"""
Phone number normalization

Customers log in with their mobile number, typed in whatever format they
like ("20 123 456", "+216 20123456", "0021620123456"). Numbers are parsed
relative to the default region and stored in E.164.
"""
from typing import Optional

import phonenumbers

from kamioun.core.config import settings


def normalize_phone(raw: Optional[str], region: Optional[str] = None) -> Optional[str]:
    """
    Return the E.164 form of a valid number, or None when it can't be parsed
    or isn't a valid number for its region.
    """
    if not raw:
        return None

    try:
        parsed = phonenumbers.parse(raw, region or settings.PHONE_DEFAULT_REGION)
    except phonenumbers.NumberParseException:
        return None

    if not phonenumbers.is_valid_number(parsed):
        return None

    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)

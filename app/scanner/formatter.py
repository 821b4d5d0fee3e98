"""
==============================================================================
Result Formatter Module
==============================================================================

Renders detected codes as the text block shown on the scan screen.

Templates:
----------
- WIFI     TYPE_WIFI / ssid / password / encryptionType, then the raw value
- URL      TYPE_URL / title / url, then the raw value
- EMAIL    TYPE_EMAIL / address / body / subject, then the raw value
- CONTACT  TYPE_CONTACT_INFO / name / organization / title / phones / emails,
           then the raw value
- other    rawValue: <raw value>

Absent values render as the literal text "null".

==============================================================================
"""

from typing import Iterable, List, Optional

from .models import ContactCode, DetectedCode, EmailCode, UrlCode, WifiCode


NULL_TEXT = "null"

ENCRYPTION_LABELS = {
    1: "OPEN",
    2: "WPA",
    3: "WEP",
}


def _text(value: Optional[object]) -> str:
    return NULL_TEXT if value is None else str(value)


def map_encryption_type(encryption_type: Optional[int]) -> str:
    """
    Map a numeric Wi-Fi encryption code to its label.

    Unrecognized codes pass through as their own text.
    """
    if encryption_type is None:
        return NULL_TEXT
    return ENCRYPTION_LABELS.get(encryption_type, str(encryption_type))


def _joined(entries: List[str]) -> str:
    """Newline-prefixed concatenation of every entry, in order."""
    return "".join(f"\n{_text(entry)}" for entry in entries)


def format_code(code: DetectedCode) -> str:
    """
    Render one detected code.

    Args:
        code: Any DetectedCode variant

    Returns:
        Display text for the code
    """
    raw_value = _text(code.raw_value)

    if isinstance(code, WifiCode):
        wifi = code.wifi
        return (
            f"TYPE_WIFI \nssid: {_text(wifi.ssid)} \npassword: {_text(wifi.password)} "
            f"\nencryptionType: {map_encryption_type(wifi.encryption_type)} \n \n{raw_value}"
        )

    if isinstance(code, UrlCode):
        url = code.url
        return f"TYPE_URL \ntitle: {_text(url.title)} \nurl: {_text(url.url)} \n\n{raw_value}"

    if isinstance(code, EmailCode):
        email = code.email
        return (
            f"TYPE_EMAIL \naddress: {_text(email.address)} \nbody: {_text(email.body)} "
            f"\nsubject: {_text(email.subject)} \n\n{raw_value}"
        )

    if isinstance(code, ContactCode):
        contact = code.contact
        return (
            f"TYPE_CONTACT_INFO \nname: {_text(contact.name)} "
            f"\norganization: {_text(contact.organization)} \ntitle: {_text(contact.title)} "
            f"\nphones: {_joined(contact.phones)} \nemails: {_joined(contact.emails)} "
            f"\n\n{raw_value}"
        )

    return f"rawValue: {raw_value}"


def format_results(
    codes: Iterable[DetectedCode],
    current: Optional[str] = None
) -> Optional[str]:
    """
    Produce the display text for a batch of detected codes.

    Every code is rendered in order into the same display value, so only
    the last one remains. An empty batch leaves ``current`` untouched.

    Args:
        codes: Codes detected in one image
        current: Text currently on screen

    Returns:
        Text to display
    """
    text = current
    for code in codes:
        text = format_code(code)
    return text

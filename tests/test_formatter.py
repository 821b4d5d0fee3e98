"""
==============================================================================
Result Formatter Tests
==============================================================================

Display text for every content type.

==============================================================================
"""

import pytest

from app.scanner.formatter import format_code, format_results, map_encryption_type
from app.scanner.models import (
    ContactCode,
    ContactPayload,
    EmailCode,
    EmailPayload,
    TextCode,
    UrlCode,
    UrlPayload,
    WifiCode,
    WifiPayload,
)


class TestEncryptionMapping:
    """Tests for Wi-Fi encryption labels."""

    @pytest.mark.parametrize("code, label", [(1, "OPEN"), (2, "WPA"), (3, "WEP")])
    def test_known_codes(self, code, label):
        assert map_encryption_type(code) == label

    @pytest.mark.parametrize("code", [0, 4, 17])
    def test_unknown_codes_pass_through(self, code):
        assert map_encryption_type(code) == str(code)

    def test_missing_code_is_null(self):
        assert map_encryption_type(None) == "null"


class TestFormatCode:
    """Tests for single code templates."""

    def test_wifi(self):
        code = WifiCode(
            raw_value="WIFI:T:WPA;S:HomeNet;P:secret1;;",
            wifi=WifiPayload(ssid="HomeNet", password="secret1", encryption_type=2),
        )
        assert format_code(code).startswith(
            "TYPE_WIFI \nssid: HomeNet \npassword: secret1 \nencryptionType: WPA "
            "\n \nWIFI:T:WPA;S:HomeNet;P:secret1;;"
        )

    def test_url_without_title(self):
        code = UrlCode(
            raw_value="https://example.com",
            url=UrlPayload(title=None, url="https://example.com"),
        )
        assert format_code(code) == (
            "TYPE_URL \ntitle: null \nurl: https://example.com \n\nhttps://example.com"
        )

    def test_email(self):
        code = EmailCode(
            raw_value="MATMSG:TO:a@b.com;SUB:Hi;BODY:Hello;;",
            email=EmailPayload(address="a@b.com", subject="Hi", body="Hello"),
        )
        assert format_code(code) == (
            "TYPE_EMAIL \naddress: a@b.com \nbody: Hello \nsubject: Hi "
            "\n\nMATMSG:TO:a@b.com;SUB:Hi;BODY:Hello;;"
        )

    def test_contact_lists_every_entry_in_order(self):
        code = ContactCode(
            raw_value="MECARD:...",
            contact=ContactPayload(
                name="Jane Roe",
                organization="Acme",
                title="CTO",
                phones=["111", "222", "333"],
                emails=["j@acme.io", "jane@home.net"],
            ),
        )
        assert format_code(code) == (
            "TYPE_CONTACT_INFO \nname: Jane Roe \norganization: Acme \ntitle: CTO "
            "\nphones: \n111\n222\n333 \nemails: \nj@acme.io\njane@home.net \n\nMECARD:..."
        )

    def test_contact_empty_lists_and_missing_fields(self):
        code = ContactCode(raw_value="BEGIN:VCARD", contact=ContactPayload())
        assert format_code(code) == (
            "TYPE_CONTACT_INFO \nname: null \norganization: null \ntitle: null "
            "\nphones:  \nemails:  \n\nBEGIN:VCARD"
        )

    def test_other_types_show_raw_value(self):
        assert format_code(TextCode(raw_value="4006381333931")) == "rawValue: 4006381333931"


class TestFormatResults:
    """Tests for batch rendering."""

    def test_last_code_wins(self):
        codes = [
            TextCode(raw_value="first"),
            TextCode(raw_value="second"),
            TextCode(raw_value="third"),
        ]
        assert format_results(codes) == "rawValue: third"

    def test_empty_batch_keeps_current_text(self):
        assert format_results([], "rawValue: previous") == "rawValue: previous"

    def test_empty_batch_without_current_text(self):
        assert format_results([]) is None

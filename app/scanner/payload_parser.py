"""
==============================================================================
Payload Parser Module
==============================================================================

Classifies decoded barcode text into structured payloads.

zbar and OpenCV only return the raw text of a code, so the content typing
(Wi-Fi credentials, bookmarks, email drafts, contact cards) happens here.

Supported encodings:
-------------------
- WIFI:      WIFI:T:WPA;S:ssid;P:password;H:false;;
- URL:       http(s)://...,  URLTO:title:url,  MEBKM:TITLE:..;URL:..;;
- EMAIL:     mailto:addr?subject=..&body=..,  MATMSG:TO:..;SUB:..;BODY:..;;,
             SMTP:addr:subject:body
- CONTACT:   BEGIN:VCARD ... END:VCARD,  MECARD:N:..;ORG:..;TEL:..;EMAIL:..;;
- TEXT:      anything else

Parsing never raises: malformed input falls back to a TEXT code.

==============================================================================
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional
from urllib.parse import parse_qs, unquote

from .models import (
    Bounds,
    ContactCode,
    ContactPayload,
    DetectedCode,
    EmailCode,
    EmailPayload,
    TextCode,
    UrlCode,
    UrlPayload,
    WifiCode,
    WifiPayload,
)


# =============================================================================
# WIFI ENCRYPTION CODES
# =============================================================================

ENCRYPTION_UNKNOWN = 0
ENCRYPTION_OPEN = 1
ENCRYPTION_WPA = 2
ENCRYPTION_WEP = 3

_ENCRYPTION_BY_NAME = {
    "": ENCRYPTION_OPEN,
    "NOPASS": ENCRYPTION_OPEN,
    "WPA": ENCRYPTION_WPA,
    "WPA2": ENCRYPTION_WPA,
    "WPA3": ENCRYPTION_WPA,
    "SAE": ENCRYPTION_WPA,
    "WEP": ENCRYPTION_WEP,
}

_VCARD_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class PayloadParser:
    """
    Turns raw decoded text into a DetectedCode variant.

    Example:
        >>> code = PayloadParser().parse("WIFI:T:WPA;S:HomeNet;P:secret1;;")
        >>> code.wifi.ssid
        'HomeNet'
    """

    def parse(
        self,
        raw_value: Optional[str],
        symbology: Optional[str] = None,
        bounds: Optional[Bounds] = None
    ) -> DetectedCode:
        """
        Classify one decoded value.

        Args:
            raw_value: Text decoded from the barcode
            symbology: Barcode format reported by the decoder
            bounds: Location of the code in the image

        Returns:
            The matching DetectedCode variant
        """
        common = {"raw_value": raw_value, "format": symbology, "bounds": bounds}

        if not raw_value:
            return TextCode(**common)

        text = raw_value.strip()
        upper = text.upper()

        if upper.startswith("WIFI:"):
            return WifiCode(wifi=self.parse_wifi(text[5:]), **common)

        if upper.startswith(("HTTP://", "HTTPS://")):
            return UrlCode(url=UrlPayload(url=text), **common)

        if upper.startswith("URLTO:"):
            title, _, url = text[6:].partition(":")
            return UrlCode(url=UrlPayload(title=title or None, url=url or None), **common)

        if upper.startswith("MEBKM:"):
            fields = self._field_map(self._split_fields(text[6:]))
            return UrlCode(
                url=UrlPayload(title=self._first(fields, "TITLE"), url=self._first(fields, "URL")),
                **common
            )

        if upper.startswith("MAILTO:"):
            return EmailCode(email=self.parse_mailto(text[7:]), **common)

        if upper.startswith("MATMSG:"):
            fields = self._field_map(self._split_fields(text[7:]))
            return EmailCode(
                email=EmailPayload(
                    address=self._first(fields, "TO"),
                    subject=self._first(fields, "SUB"),
                    body=self._first(fields, "BODY"),
                ),
                **common
            )

        if upper.startswith("SMTP:"):
            parts = text[5:].split(":", 2)
            parts += [None] * (3 - len(parts))
            return EmailCode(
                email=EmailPayload(address=parts[0] or None, subject=parts[1], body=parts[2]),
                **common
            )

        if upper.startswith("BEGIN:VCARD"):
            return ContactCode(contact=self.parse_vcard(text), **common)

        if upper.startswith("MECARD:"):
            return ContactCode(contact=self.parse_mecard(text[7:]), **common)

        return TextCode(**common)

    # =========================================================================
    # FORMAT SPECIFIC PARSERS
    # =========================================================================

    def parse_wifi(self, body: str) -> WifiPayload:
        """Parse the part of a WIFI: code after the prefix."""
        fields = self._field_map(self._split_fields(body))

        auth = self._first(fields, "T")
        encryption = _ENCRYPTION_BY_NAME.get((auth or "").strip().upper(), ENCRYPTION_UNKNOWN)

        return WifiPayload(
            ssid=self._first(fields, "S"),
            password=self._first(fields, "P"),
            encryption_type=encryption,
        )

    def parse_mailto(self, body: str) -> EmailPayload:
        """Parse a mailto: URI without its scheme."""
        address, _, query = body.partition("?")
        params: Dict[str, List[str]] = {}
        for key, values in parse_qs(query, keep_blank_values=True).items():
            params.setdefault(key.lower(), []).extend(values)

        def _param(name: str) -> Optional[str]:
            values = params.get(name)
            return values[0] if values else None

        return EmailPayload(
            address=unquote(address) or None,
            subject=_param("subject"),
            body=_param("body"),
        )

    def parse_mecard(self, body: str) -> ContactPayload:
        """Parse the part of a MECARD: code after the prefix."""
        fields = self._field_map(self._split_fields(body))

        name = self._first(fields, "N")
        if name and "," in name:
            last, _, first = name.partition(",")
            name = f"{first.strip()} {last.strip()}".strip()

        return ContactPayload(
            name=name,
            organization=self._first(fields, "ORG"),
            title=self._first(fields, "TITLE"),
            phones=fields.get("TEL", []),
            emails=fields.get("EMAIL", []),
        )

    def parse_vcard(self, text: str) -> ContactPayload:
        """Parse a vCard 2.1/3.0/4.0 document."""
        formatted_name = None
        structured_name = None
        organization = None
        title = None
        phones: List[str] = []
        emails: List[str] = []

        for line in self._unfold_vcard(text):
            key, sep, value = line.partition(":")
            if not sep:
                continue

            # "item1.TEL;TYPE=CELL" -> "TEL"
            prop = key.split(";", 1)[0].rsplit(".", 1)[-1].strip().upper()
            value = value.strip()

            if prop == "FN":
                formatted_name = self._unescape_vcard(value) or None
            elif prop == "N":
                structured_name = self._structured_name(value)
            elif prop == "ORG":
                organization = " ".join(
                    self._unescape_vcard(part) for part in self._split_vcard(value) if part
                ) or None
            elif prop == "TITLE":
                title = self._unescape_vcard(value) or None
            elif prop == "TEL" and value:
                phones.append(self._unescape_vcard(value))
            elif prop == "EMAIL" and value:
                emails.append(self._unescape_vcard(value))

        return ContactPayload(
            name=formatted_name or structured_name,
            organization=organization,
            title=title,
            phones=phones,
            emails=emails,
        )

    # =========================================================================
    # FIELD HELPERS
    # =========================================================================

    @staticmethod
    def _split_fields(body: str) -> List[str]:
        """Split on unescaped semicolons, resolving backslash escapes."""
        fields = []
        current = []
        escaped = False

        for char in body:
            if escaped:
                current.append(char)
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == ";":
                fields.append("".join(current))
                current = []
            else:
                current.append(char)

        if current:
            fields.append("".join(current))

        return [field for field in fields if field]

    @staticmethod
    def _field_map(fields: List[str]) -> Dict[str, List[str]]:
        """Group 'KEY:value' fields by key, keeping repeated keys in order."""
        mapped: Dict[str, List[str]] = {}
        for field in fields:
            key, sep, value = field.partition(":")
            if not sep:
                continue
            mapped.setdefault(key.strip().upper(), []).append(value)
        return mapped

    @staticmethod
    def _first(fields: Dict[str, List[str]], key: str) -> Optional[str]:
        values = fields.get(key)
        return values[0] if values else None

    @staticmethod
    def _unfold_vcard(text: str) -> List[str]:
        lines: List[str] = []
        for line in _VCARD_LINE_BREAK.split(text):
            if line[:1] in (" ", "\t") and lines:
                lines[-1] += line[1:]
            elif line:
                lines.append(line)
        return lines

    @staticmethod
    def _split_vcard(value: str) -> List[str]:
        return re.split(r"(?<!\\);", value)

    @staticmethod
    def _unescape_vcard(value: str) -> str:
        return (
            value.replace("\\n", "\n")
            .replace("\\N", "\n")
            .replace("\\,", ",")
            .replace("\\;", ";")
            .replace("\\\\", "\\")
            .strip()
        )

    def _structured_name(self, value: str) -> Optional[str]:
        """Build a display name from N:Last;First;Middle;Prefix;Suffix."""
        parts = [self._unescape_vcard(part) for part in self._split_vcard(value)]
        parts += [""] * (5 - len(parts))
        last, first, middle, prefix, suffix = parts[:5]
        name = " ".join(part for part in (prefix, first, middle, last, suffix) if part)
        return name or None


_parser = PayloadParser()


def parse_payload(
    raw_value: Optional[str],
    symbology: Optional[str] = None,
    bounds: Optional[Bounds] = None
) -> DetectedCode:
    """Classify raw decoded text with the shared parser."""
    return _parser.parse(raw_value, symbology, bounds)

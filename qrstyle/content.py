"""QR payload builders: URL, WhatsApp, text, Wi-Fi, vCard and e-mail."""

import re
from enum import Enum
from urllib.parse import quote, urlsplit

from qrstyle.logging import get_logger

log = get_logger("content")

MAX_BATCH_ITEMS = 100
DEFAULT_COUNTRY_CODE = "91"


class QRMode(str, Enum):
    URL = "url"
    WHATSAPP = "whatsapp"
    TEXT = "text"
    WIFI = "wifi"
    VCARD = "vcard"
    EMAIL = "email"


def _encode_component(value: str) -> str:
    # Same reserved set as JavaScript's encodeURIComponent
    return quote(value, safe="-_.!~*'()")


def _with_scheme(url: str) -> str:
    url = url.strip()
    if url and not url.startswith(("http://", "https://")):
        url = "https://" + url
    return url


def _vcard(data: dict[str, str]) -> str:
    first, last = data.get("firstName", ""), data.get("lastName", "")
    lines = [
        "BEGIN:VCARD",
        "VERSION:3.0",
        f"N:{last};{first};;;",
        f"FN:{first} {last}",
    ]
    for key, prefix in [("phone", "TEL:"), ("email", "EMAIL:"), ("company", "ORG:"),
                        ("title", "TITLE:"), ("website", "URL:")]:
        if data.get(key):
            lines.append(prefix + data[key])
    if data.get("address"):
        lines.append(f"ADR:;;{data['address']};;;;")
    lines.append("END:VCARD")
    return "\n".join(lines)


def build_content(mode: QRMode | str, data: dict[str, str]) -> str:
    """Build the text payload to encode for a given mode."""
    mode = QRMode(mode)

    if mode == QRMode.URL:
        return _with_scheme(data.get("url", ""))

    if mode == QRMode.WHATSAPP:
        phone = re.sub(r"\D", "", data.get("phone", ""))
        country = data.get("countryCode") or DEFAULT_COUNTRY_CODE
        message = _encode_component(data["message"]) if data.get("message") else ""
        return f"https://wa.me/{country}{phone}" + (f"?text={message}" if message else "")

    if mode == QRMode.TEXT:
        return data.get("text", "")

    if mode == QRMode.WIFI:
        auth = data.get("authType") or "WPA"
        hidden = "H:true" if data.get("hidden") == "true" else ""
        return f"WIFI:T:{auth};S:{data.get('ssid', '')};P:{data.get('password', '')};{hidden};"

    if mode == QRMode.VCARD:
        return _vcard(data)

    params = []
    if data.get("subject"):
        params.append(f"subject={_encode_component(data['subject'])}")
    if data.get("body"):
        params.append(f"body={_encode_component(data['body'])}")
    return f"mailto:{data.get('email', '')}" + ("?" + "&".join(params) if params else "")


def is_valid_url(url: str) -> bool:
    """Loose check: parses with an assumed https scheme and is 3+ chars."""
    candidate = url if url.startswith("http") else f"https://{url}"
    try:
        parts = urlsplit(candidate)
        host = parts.hostname
    except ValueError:
        return False
    return bool(host) and " " not in host and len(url) >= 3


def parse_batch_line(line: str, mode: QRMode | str) -> dict[str, str]:
    """Split one ``|``-separated batch line into builder fields.

    Formats:
        whatsapp  +91 1234567890 | Message
        email     addr@example.com | Subject | Body
        wifi      SSID | Password | WPA/WEP/nopass
        vcard     First Last | Phone | Email | Company
    """
    mode = QRMode(mode)
    if mode == QRMode.URL:
        return {"url": line}
    if mode == QRMode.TEXT:
        return {"text": line}

    parts = [p.strip() for p in line.split("|")]

    def field(i: int, default: str = "") -> str:
        return parts[i] if len(parts) > i and parts[i] else default

    if mode == QRMode.WHATSAPP:
        phone_part = re.sub(r"[^0-9+]", "", parts[0])
        country = phone_part[1:3] if phone_part.startswith("+") else DEFAULT_COUNTRY_CODE
        phone = re.sub(r"^\+?\d{2}", "", phone_part)
        return {"phone": phone, "countryCode": country, "message": field(1, "Hello")}
    if mode == QRMode.EMAIL:
        return {"email": parts[0], "subject": field(1), "body": field(2)}
    if mode == QRMode.WIFI:
        return {"ssid": parts[0], "password": field(1), "authType": field(2, "WPA")}

    names = parts[0].split(" ")
    return {
        "firstName": names[0],
        "lastName": " ".join(names[1:]),
        "phone": field(1),
        "email": field(2),
        "company": field(3),
    }


def batch_lines(text: str, limit: int = MAX_BATCH_ITEMS) -> list[str]:
    """Non-blank, stripped lines of batch input; at most *limit* of them."""
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if not lines:
        raise ValueError("Batch input is empty")
    if len(lines) > limit:
        raise ValueError(f"Maximum {limit} items allowed per batch, got {len(lines)}")
    return lines


def batch_filename(line: str, mode: QRMode | str, index: int) -> str:
    """File stem for batch item *index* (0-based): ``{mode}-{n}-{name}``.

    URL items are named after their hostname with dots as dashes; anything
    else uses its first 30 characters with non-alphanumerics as ``_``.
    """
    mode = QRMode(mode)
    name = re.sub(r"[^a-zA-Z0-9]", "_", line[:30])
    if mode == QRMode.URL:
        try:
            host = urlsplit(_with_scheme(line)).hostname
        except ValueError:
            host = None
        if host:
            name = host.replace(".", "-")
    return f"{mode.value}-{index + 1}-{name}"


def parse_batch(text: str, mode: QRMode | str, limit: int = MAX_BATCH_ITEMS) -> list[str]:
    """Turn multi-line batch input into encoded payloads, one per non-blank line."""
    lines = batch_lines(text, limit)
    log.debug("parsed %d batch lines (mode=%s)", len(lines), QRMode(mode).value)
    return [build_content(mode, parse_batch_line(line, mode)) for line in lines]

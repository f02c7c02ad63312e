import pytest

from qrstyle.content import batch_filename, batch_lines, build_content, is_valid_url, parse_batch, parse_batch_line


@pytest.mark.parametrize("mode, data, expected", [
    ("url", {"url": "example.com"}, "https://example.com"),
    ("url", {"url": "http://example.com/x"}, "http://example.com/x"),
    ("text", {"text": "hello world"}, "hello world"),
    ("whatsapp", {"phone": "98765 43210", "countryCode": "44"}, "https://wa.me/449876543210"),
    ("whatsapp", {"phone": "123", "message": "Hi there!"}, "https://wa.me/91123?text=Hi%20there!"),
    ("wifi", {"ssid": "Home", "password": "pw"}, "WIFI:T:WPA;S:Home;P:pw;;"),
    ("wifi", {"ssid": "Lab", "password": "", "authType": "nopass", "hidden": "true"},
     "WIFI:T:nopass;S:Lab;P:;H:true;"),
    ("email", {"email": "a@b.co"}, "mailto:a@b.co"),
    ("email", {"email": "a@b.co", "subject": "Q&A", "body": "x y"}, "mailto:a@b.co?subject=Q%26A&body=x%20y"),
])
def test_build_content(mode, data, expected):
    assert build_content(mode, data) == expected


def test_vcard():
    card = build_content("vcard", {"firstName": "Ada", "lastName": "Lovelace", "phone": "+44 1", "company": "AE"})
    assert card.splitlines() == [
        "BEGIN:VCARD",
        "VERSION:3.0",
        "N:Lovelace;Ada;;;",
        "FN:Ada Lovelace",
        "TEL:+44 1",
        "ORG:AE",
        "END:VCARD",
    ]


def test_unknown_mode():
    with pytest.raises(ValueError):
        build_content("sms", {})


@pytest.mark.parametrize("url, ok", [
    ("example.com", True),
    ("https://example.com/path", True),
    ("ab", False),
    ("", False),
    ("http://", False),
])
def test_is_valid_url(url, ok):
    assert is_valid_url(url) is ok


def test_parse_batch_lines():
    assert parse_batch_line("+44 7700900123 | Hi", "whatsapp") == {
        "phone": "7700900123", "countryCode": "44", "message": "Hi",
    }
    assert parse_batch_line("+44 7700900123", "whatsapp")["message"] == "Hello"
    assert parse_batch_line("me@x.io | Subj", "email") == {"email": "me@x.io", "subject": "Subj", "body": ""}
    assert parse_batch_line("Cafe | secret", "wifi") == {"ssid": "Cafe", "password": "secret", "authType": "WPA"}
    assert parse_batch_line("Grace Brewster Hopper | 555", "vcard") == {
        "firstName": "Grace", "lastName": "Brewster Hopper", "phone": "555", "email": "", "company": "",
    }


def test_parse_batch_skips_blank_lines():
    assert parse_batch("a.com\n\n  \nb.com\n", "url") == ["https://a.com", "https://b.com"]


def test_parse_batch_limits():
    with pytest.raises(ValueError):
        parse_batch("\n \n", "url")
    with pytest.raises(ValueError):
        parse_batch("\n".join(f"line {i}" for i in range(101)), "text")
    assert len(parse_batch("\n".join(f"line {i}" for i in range(100)), "text")) == 100


@pytest.mark.parametrize("line, mode, index, expected", [
    ("example.com/path", "url", 0, "url-1-example-com"),
    ("http://sub.domain.org:8080/x", "url", 4, "url-5-sub-domain-org"),
    ("Home | secret", "wifi", 1, "wifi-2-Home___secret"),
    ("a" * 40, "text", 2, "text-3-" + "a" * 30),
])
def test_batch_filename(line, mode, index, expected):
    assert batch_filename(line, mode, index) == expected


def test_batch_lines_strip_and_skip_blanks():
    assert batch_lines("  one \n\n two\n") == ["one", "two"]

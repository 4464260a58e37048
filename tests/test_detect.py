import pytest

from transadif.charsets import Encoding
from transadif.detect import detect_encoding, header_encoding_name
from transadif.errors import UnsupportedEncoding


def test_hint_wins():
    data = "<name:4>José<eor>".encode("utf-8")
    assert detect_encoding(data, "latin1") is Encoding.ISO_8859_1


def test_bad_hint_is_fatal():
    with pytest.raises(UnsupportedEncoding):
        detect_encoding(b"<call:3>K1A<eor>", "ebcdic")


def test_header_field_is_used():
    data = b"log <ENCODING:12>Windows-1252\n<EOH>\n<name:4>Jos\xe9<eor>"
    assert header_encoding_name(data) == "Windows-1252"
    assert detect_encoding(data) is Encoding.WINDOWS_1252


def test_unsupported_header_encoding_is_ignored():
    data = b"log <encoding:5>KOI-8 <eoh><call:3>K1A<eor>"
    assert header_encoding_name(data) == "KOI-8"
    assert detect_encoding(data) is Encoding.UTF_8


def test_header_lookup_stops_at_first_sentinel():
    assert header_encoding_name(b"<call:3>K1A<eor><encoding:5>UTF-8") is None
    assert header_encoding_name(b"no tags at all") is None


def test_clean_utf8_and_ascii():
    assert detect_encoding(b"") is Encoding.UTF_8
    assert detect_encoding(b"<call:5>K1MIX<eor>") is Encoding.UTF_8
    assert detect_encoding("<name:4>José<eor>".encode("utf-8")) is Encoding.UTF_8


def test_invalid_utf8_falls_back_to_single_byte():
    data = b"<name:4>Jos\xe9 <qth:6>M\xe1laga <eor>\n" * 20
    assert detect_encoding(data) in (Encoding.WINDOWS_1252, Encoding.ISO_8859_1)


def test_mis_decoded_utf8_is_not_trusted():
    data = "<name:7>Ã±eco<eor>\n".encode("utf-8")
    assert detect_encoding(data) in (Encoding.WINDOWS_1252, Encoding.ISO_8859_1)

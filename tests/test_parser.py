import pytest

from transadif.charsets import Encoding
from transadif.errors import MalformedField, StrictModeViolation
from transadif.lengths import BYTES, CHARS
from transadif.parser import parse_document


def _issues(warnings):
    return [w.issue for w in warnings]


def test_records_without_header():
    doc, warnings = parse_document(b"<call:5>K1MIX<band:3>40m<eor>")
    assert warnings == []
    assert doc.encoding is Encoding.UTF_8
    assert doc.header.fields == []
    assert doc.header.preamble == ""
    assert doc.header.sentinel is None
    assert len(doc.records) == 1

    call, band = doc.records[0].fields
    assert (call.name, call.declared_length, call.text) == ("call", 5, "K1MIX")
    assert (band.name, band.declared_length, band.text) == ("band", 3, "40m")
    assert doc.records[0].sentinel == "<eor>"


def test_header_and_trailing_text_are_kept():
    data = b"ADIF export\n<ADIF_VER:5>3.1.4\n<EOH>\n\n<CALL:4>W1AW <BAND:3>20M\n<EOR>\n"
    doc, _ = parse_document(data)

    header = doc.header
    assert header.preamble == "ADIF export\n"
    assert [(f.name, f.text, f.trailing) for f in header.fields] == [("ADIF_VER", "3.1.4", "\n")]
    assert header.sentinel == "<EOH>"
    assert header.trailing == "\n\n"

    record = doc.records[0]
    assert [(f.name, f.text, f.trailing) for f in record.fields] == [("CALL", "W1AW", " "), ("BAND", "20M", "\n")]
    assert record.sentinel == "<EOR>"
    assert record.trailing == "\n"


def test_text_preamble_without_header_terminator():
    doc, _ = parse_document(b"just some notes\n<call:3>K1A<eor>")
    assert doc.header.preamble == "just some notes\n"
    assert doc.header.fields == []
    assert doc.header.sentinel is None
    assert doc.records[0].fields[0].text == "K1A"


def test_leading_tag_means_no_header():
    doc, _ = parse_document(b"<call:3>K1A <eoh> <eor>")
    assert doc.header.sentinel is None
    assert doc.records[0].fields[0].trailing == " <eoh> "


def test_unterminated_last_record_and_empty_records():
    doc, _ = parse_document(b"<call:3>K1A<eor><eor>\n<call:3>K2B")
    assert len(doc.records) == 3
    assert doc.records[1].fields == []
    assert doc.records[1].trailing == "\n"
    assert doc.records[2].sentinel is None
    assert doc.records[2].fields[0].text == "K2B"


def test_field_names_keep_order_and_duplicates():
    doc, _ = parse_document(b"<call:3>K1A<Call:3>K2B<type_x:1:S>y<eor>")
    fields = doc.records[0].fields
    assert [f.name for f in fields] == ["call", "Call", "type_x"]
    assert fields[2].type_tag == "S"
    assert fields[2].tag == "<type_x:1:S>"


def test_signed_length_is_malformed():
    with pytest.raises(MalformedField) as exc:
        parse_document(b"<call:-3>abc<eor>")
    assert exc.value.name == "call"


def test_truncated_field_aborts_parse():
    with pytest.raises(MalformedField):
        parse_document(b"<call:3>K1A<eor><comment:40>cut short")


def test_mis_decoded_field_is_corrected():
    doc, warnings = parse_document(b"<name:2>\xc3\xb1<eor>", hint="ISO-8859-1")
    assert doc.records[0].fields[0].text == "ñ"
    assert _issues(warnings) == ["mojibake_corrected"]
    assert warnings[0].record == 1
    assert warnings[0].field == "name"


def test_strict_mode_keeps_text_as_decoded():
    doc, warnings = parse_document(b"<name:2>\xc3\xb1<eor>", hint="ISO-8859-1", strict=True)
    assert doc.records[0].fields[0].text == "Ã±"
    assert warnings == []


def test_double_encoded_utf8_file():
    data = "<name:7>Ã±eco<eor>\n".encode("utf-8")
    doc, _ = parse_document(data)
    assert doc.encoding.is_single_byte
    assert doc.records[0].fields[0].text == "ñeco"


def test_character_counted_lengths():
    data = "<name:4>José <qth:5>Paris<eor>".encode("utf-8")
    doc, warnings = parse_document(data)
    name, qth = doc.records[0].fields
    assert (name.text, name.unit, name.trailing) == ("José", CHARS, " ")
    assert (qth.text, qth.unit) == ("Paris", BYTES)
    assert "length_reinterpreted" in _issues(warnings)


def test_resolved_unit_matches_text():
    data = "<a:4>José <b:5>José<c:3>日<eor>".encode("utf-8")
    doc, _ = parse_document(data, strict=True)
    for field in doc.records[0].fields:
        if field.unit == CHARS:
            assert len(field.text) == field.declared_length
        else:
            assert len(field.raw_bytes) == field.declared_length


def test_invalid_bytes_are_recovered_or_refused():
    data = b"<name:4>Jos\xe9<eor>"
    doc, warnings = parse_document(data, hint="utf-8")
    assert doc.records[0].fields[0].text == "José"
    assert _issues(warnings) == ["invalid_bytes_recovered"]

    with pytest.raises(StrictModeViolation) as exc:
        parse_document(data, hint="utf-8", strict=True)
    assert exc.value.field == "name"


def test_entities_are_expanded_outside_strict_mode():
    data = b"<note:8>AT&amp;T<eor>"
    doc, warnings = parse_document(data)
    assert doc.records[0].fields[0].text == "AT&T"
    assert _issues(warnings) == ["entities_decoded"]

    doc, _ = parse_document(data, strict=True)
    assert doc.records[0].fields[0].text == "AT&amp;T"


def test_unsupported_header_encoding_is_reported():
    doc, warnings = parse_document(b"log <encoding:5>KOI-8\n<eoh>\n<call:3>K1A<eor>")
    assert doc.encoding is Encoding.UTF_8
    assert _issues(warnings) == ["unsupported_header_encoding"]
    assert warnings[0].record is None


def test_clean_utf8_with_typographic_punctuation():
    data = "<comment:6>CAFÉ’S<call:3>K1A<eor>".encode("utf-8")
    doc, warnings = parse_document(data)
    assert doc.encoding is Encoding.UTF_8
    comment, call = doc.records[0].fields
    assert (comment.text, comment.unit, comment.trailing) == ("CAFÉ’S", CHARS, "")
    assert call.text == "K1A"
    assert "mojibake_corrected" not in _issues(warnings)

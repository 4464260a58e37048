from transadif.document import AdifDocument, AdifField, AdifHeader


def _header(*names, trailing="\r\n"):
    fields = [AdifField(name=n, declared_length=1, text="x", tag=f"<{n}:1>", trailing=trailing) for n in names]
    return AdifDocument(header=AdifHeader(fields=fields, sentinel="<EOH>"))


def test_render_tag():
    assert AdifField(name="call", declared_length=5).render_tag() == "<call:5>"
    assert AdifField(name="freq", declared_length=6, type_tag="N").render_tag() == "<freq:6:N>"


def test_lookups_ignore_case():
    doc = _header("ADIF_VER", "ProgramId")
    assert doc.get_header_field("programid") is doc.header.fields[1]
    assert doc.get_header_field("ENCODING") is None


def test_new_field_goes_after_programid():
    doc = _header("ADIF_VER", "PROGRAMID", "CREATED_TIMESTAMP")
    doc.set_header_field("ENCODING", "UTF-8")
    assert [f.name for f in doc.header.fields] == ["ADIF_VER", "PROGRAMID", "ENCODING", "CREATED_TIMESTAMP"]
    assert doc.header.fields[2].trailing == "\r\n"


def test_new_field_goes_first_without_programid():
    doc = _header("ADIF_VER", trailing=" ")
    added = doc.set_header_field("ENCODING", "ASCII")
    assert doc.header.fields[0] is added
    assert (added.declared_length, added.trailing) == (5, " ")


def test_programid_is_always_inserted_first():
    doc = _header("ADIF_VER", "ENCODING")
    doc.set_header_field("PROGRAMID", "TransADIF")
    assert [f.name for f in doc.header.fields] == ["PROGRAMID", "ADIF_VER", "ENCODING"]


def test_empty_header_gets_newline_separator():
    doc = AdifDocument()
    added = doc.set_header_field("ENCODING", "UTF-8")
    assert doc.header.fields == [added]
    assert added.trailing == "\n"


def test_existing_field_is_updated_in_place():
    doc = _header("adif_ver", "encoding")
    field = doc.set_header_field("ENCODING", "Windows-1252")
    assert field is doc.header.fields[1]
    assert (field.name, field.text, field.declared_length, field.tag) == ("encoding", "Windows-1252", 12, "")
    assert field.trailing == "\r\n"


def test_unchanged_value_keeps_original_tag():
    doc = _header("ENCODING")
    field = doc.set_header_field("ENCODING", "x")
    assert field.tag == "<ENCODING:1>"

from transadif.entities import decode_entities


def test_named_references():
    assert decode_entities("AT&amp;T") == "AT&T"
    assert decode_entities("&lt;eor&gt;") == "<eor>"
    assert decode_entities("Jos&eacute;") == "José"


def test_numeric_references():
    assert decode_entities("&#65;&#x42;&#X43;") == "ABC"
    assert decode_entities("&0xF1;eco") == "ñeco"
    assert decode_entities("&0x0141;ukasz") == "Łukasz"


def test_unknown_or_invalid_references_are_kept():
    assert decode_entities("&bogus; & done") == "&bogus; & done"
    assert decode_entities("&#xD800;") == "&#xD800;"
    assert decode_entities("&#99999999;") == "&#99999999;"
    assert decode_entities("no references") == "no references"

from transadif.tokenizer import EOH, EOR, FIELD, find_eoh, match_token, next_token


def test_match_field_with_type():
    token = match_token(b"<QSO_DATE:8:D>20240101", 0)
    assert token.kind == FIELD
    assert (token.name, token.length, token.type_tag) == ("QSO_DATE", "8", "D")
    assert (token.start, token.end) == (0, 14)


def test_match_sentinels_case_insensitively():
    assert match_token(b"<EoR>", 0).kind == EOR
    assert match_token(b"<eoh>", 0).kind == EOH


def test_non_tags_are_text():
    assert match_token(b"<note: hi>", 0) is None
    assert match_token(b"<1call:3>", 0) is None
    assert match_token(b"<call>", 0) is None


def test_next_token_skips_text():
    buf = b"a < b <x> <call:3>K1A"
    token = next_token(buf, 0)
    assert token.kind == FIELD
    assert token.start == buf.index(b"<call")
    assert next_token(buf, token.end) is None


def test_signed_lengths_are_still_recognized():
    assert match_token(b"<call:-3>", 0).length == "-3"


def test_find_eoh():
    assert find_eoh(b"header <EOH> <call:1>x") == 7
    assert find_eoh(b"<call:1>x<eor>") == -1

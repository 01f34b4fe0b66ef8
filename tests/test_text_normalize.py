from text_normalize import normalize


def test_lowercases_and_trims():
    assert normalize("  Um,   YOU know  ") == "um you know"


def test_strips_diacritics():
    assert normalize("Então, estás a ver?") == "entao estas a ver"


def test_keeps_apostrophes_and_digits():
    assert normalize("I'm 42 -- OK!") == "i'm 42 ok"


def test_punctuation_and_underscore_become_spaces():
    assert normalize("so...well_right") == "so well right"


def test_empty_and_none():
    assert normalize("") == ""
    assert normalize(None) == ""
    assert normalize(" ?! ") == ""

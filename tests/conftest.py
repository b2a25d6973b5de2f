import pytest

ABANDON = "abandon " * 11 + "about"

# BIP39 reference vectors (entropy hex, phrase)
BIP39_VECTORS = [
    ("00000000000000000000000000000000", ABANDON),
    (
        "7f7f7f7f7f7f7f7f7f7f7f7f7f7f7f7f",
        "legal winner thank year wave sausage worth useful legal winner thank yellow",
    ),
    (
        "80808080808080808080808080808080",
        "letter advice cage absurd amount doctor acoustic avoid letter advice cage above",
    ),
    ("ffffffffffffffffffffffffffffffff", "zoo " * 11 + "wrong"),
    ("00" * 32, "abandon " * 23 + "art"),
    ("ff" * 32, "zoo " * 23 + "vote"),
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "GEVULOT_MNEMONIC",
        "GEVULOT_PASSWORD",
        "GVLT_DERIVATION_PATH",
        "GVLT_HRP",
        "GVLT_ENTROPY_BITS",
        "GVLT_WORKERS",
        "GVLT_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

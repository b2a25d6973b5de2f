import pytest

from gvltkeys import mnemonic_codec
from gvltkeys.errors import (
    ChecksumMismatchError,
    InvalidEntropyLength,
    InvalidMnemonicLength,
    UnknownWordError,
)
from gvltkeys.keygen import new_mnemonic, parse_mnemonic

from conftest import ABANDON, BIP39_VECTORS


@pytest.mark.parametrize("entropy_hex,phrase", BIP39_VECTORS)
def test_reference_vectors(entropy_hex, phrase):
    m = mnemonic_codec.from_entropy(bytes.fromhex(entropy_hex))
    assert m.phrase == phrase.strip()

    parsed = parse_mnemonic(phrase)
    assert parsed.entropy.hex() == entropy_hex
    assert parsed.words == m.words


@pytest.mark.parametrize(
    "bits,words", [(128, 12), (160, 15), (192, 18), (224, 21), (256, 24)]
)
def test_generate_lengths_and_recover_entropy(bits, words):
    m = new_mnemonic(bits)
    assert len(m.words) == words
    assert m.entropy_bits == bits
    assert parse_mnemonic(m.phrase).entropy == m.entropy


def test_generate_is_random():
    assert new_mnemonic(128).entropy != new_mnemonic(128).entropy


@pytest.mark.parametrize("bits", [0, 64, 127, 129, 255, 512])
def test_generate_rejects_bad_entropy_length(bits):
    with pytest.raises(InvalidEntropyLength):
        new_mnemonic(bits)


def test_generate_rejects_mismatched_supplied_entropy():
    with pytest.raises(InvalidEntropyLength):
        mnemonic_codec.generate(256, b"\x00" * 16)


def test_checksum_property():
    m = parse_mnemonic(ABANDON)
    # "about" is word 3: seven zero bits then checksum 0b0011
    assert m.checksum == 3


def test_unknown_word_rejected_before_checksum(monkeypatch):
    def fail(entropy):
        raise AssertionError("checksum must not be computed")

    monkeypatch.setattr(mnemonic_codec, "checksum_bits", fail)
    phrase = "abandon " * 11 + "abandonn"
    with pytest.raises(UnknownWordError) as exc:
        parse_mnemonic(phrase)
    assert exc.value.word == "abandonn"
    assert exc.value.position == 12
    assert "abandon" in exc.value.suggestions


def test_unknown_word_error_pickles():
    import pickle

    err = UnknownWordError("zooo", 3, ["zoo"])
    copy = pickle.loads(pickle.dumps(err))
    assert copy.word == "zooo"
    assert str(copy) == str(err)


def test_bad_checksum_rejected():
    with pytest.raises(ChecksumMismatchError):
        parse_mnemonic("abandon " * 12)


def test_wrong_word_count_rejected():
    with pytest.raises(InvalidMnemonicLength):
        parse_mnemonic("abandon " * 11)
    with pytest.raises(InvalidMnemonicLength):
        parse_mnemonic("")


def test_parse_normalizes_whitespace_and_case():
    messy = "  ABANDON\tabandon  abandon abandon abandon abandon\nabandon abandon abandon abandon abandon About "
    assert parse_mnemonic(messy).phrase == ABANDON


def test_repr_hides_words():
    assert "abandon" not in repr(parse_mnemonic(ABANDON))

"""
Typed errors raised by the key-derivation pipeline.

All of them derive from ValueError so call sites that already catch
ValueError around key handling keep working. Each class carries the
process exit status the CLI uses for it.
"""


class KeyDerivationError(ValueError):
    """Base class for every error raised by gvltkeys."""

    exit_code = 1


class InvalidEntropyLength(KeyDerivationError):
    exit_code = 10


class MnemonicError(KeyDerivationError):
    """A user-supplied phrase could not be accepted."""

    exit_code = 11


class InvalidMnemonicLength(MnemonicError):
    exit_code = 12


class UnknownWordError(MnemonicError):
    exit_code = 13

    def __init__(self, word: str, position: int, suggestions=()):
        self.word = word
        self.position = position
        self.suggestions = tuple(suggestions)
        msg = f"'{word}' (word {position}) is not a valid BIP39 word"
        if self.suggestions:
            msg += f"; did you mean: {', '.join(self.suggestions)}?"
        super().__init__(msg)

    def __reduce__(self):
        return (type(self), (self.word, self.position, self.suggestions))


class ChecksumMismatchError(MnemonicError):
    exit_code = 14


class InvalidPathSyntax(KeyDerivationError):
    exit_code = 15


class DerivationArithmeticError(KeyDerivationError):
    exit_code = 16


class InvalidKeyMaterialError(KeyDerivationError):
    exit_code = 17


class EncodingError(KeyDerivationError):
    exit_code = 18

"""
Phrase -> seed -> BIP32 key -> signing key + account id.

Every function here is a pure derivation: secrets are held in
SecretBuffers that are wiped before the function returns, and nothing
is kept between calls, so derivations may run concurrently.
"""

import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple, Union

from . import bech32_codec, mnemonic_codec
from .account import DEFAULT_HRP, AccountId
from .config import Settings
from .errors import InvalidPathSyntax, KeyDerivationError, MnemonicError
from .hd_key import derive_path
from .key_codec import KeyVariant, SigningKey, encode_extended_key, signing_key
from .mnemonic_codec import Mnemonic
from .path import DEFAULT_PATH, HARDENED, DerivationPath, as_path
from .seed import derive_seed

logger = logging.getLogger(__name__)

PathLike = Union[str, DerivationPath]


def new_mnemonic(entropy_bits: int = 256) -> Mnemonic:
    return mnemonic_codec.generate(entropy_bits)


def parse_mnemonic(phrase: str) -> Mnemonic:
    return mnemonic_codec.parse(phrase)


def _prepare(mnemonic, path, hrp) -> Tuple[Mnemonic, DerivationPath]:
    """Validate every input before any key material is derived."""
    path = as_path(path)
    bech32_codec.check_hrp(hrp)
    if isinstance(mnemonic, str):
        mnemonic = mnemonic_codec.parse(mnemonic)
    return mnemonic, path


def derive_account(
    mnemonic: Union[Mnemonic, str],
    passphrase: str = "",
    path: PathLike = DEFAULT_PATH,
    hrp: str = DEFAULT_HRP,
) -> Tuple[AccountId, SigningKey]:
    """Derive the account id and signing key at `path`."""
    mnemonic, path = _prepare(mnemonic, path, hrp)
    with derive_seed(mnemonic, passphrase) as seed, derive_path(seed, path) as key:
        sk = signing_key(key)
    account = sk.account_id(hrp)
    logger.debug("derived account %s at %s", account, path)
    return account, sk


@dataclass(frozen=True)
class DerivedAccount:
    path: DerivationPath
    account: AccountId
    signing_key: SigningKey = field(repr=False, compare=False)


def derive_accounts(
    mnemonic: Union[Mnemonic, str],
    passphrase: str = "",
    path: PathLike = DEFAULT_PATH,
    hrp: str = DEFAULT_HRP,
    count: int = 1,
) -> List[DerivedAccount]:
    """Derive `count` consecutive addresses, starting at the last segment of `path`.

    With the default path this walks m/44'/118'/0'/0/0, .../0/1, ...
    """
    mnemonic, path = _prepare(mnemonic, path, hrp)
    if count < 1:
        raise KeyDerivationError(f"count must be at least 1, got {count}")
    if not len(path):
        raise KeyDerivationError("path needs at least one segment to iterate")

    parent_path = DerivationPath(path.segments[:-1])
    last = path.segments[-1]
    if last.index + count > HARDENED:
        raise InvalidPathSyntax(
            f"{count} addresses from {last} run past child index {HARDENED - 1}"
        )
    accounts = []
    try:
        with derive_seed(mnemonic, passphrase) as seed, derive_path(
            seed, parent_path
        ) as parent:
            for i in range(last.index, last.index + count):
                with parent.derive_child(i, last.hardened) as child:
                    sk = signing_key(child)
                accounts.append(
                    DerivedAccount(path.with_address_index(i), sk.account_id(hrp), sk)
                )
    except BaseException:
        for account in accounts:
            account.signing_key.wipe()
        raise
    return accounts


@dataclass(frozen=True)
class KeyReport:
    """What the keygen / compute-key commands print."""

    account_id: str
    path: str
    xpub: str
    xprv: str = field(repr=False)
    mnemonic: Optional[str] = field(default=None, repr=False)

    def to_dict(self, include_private: bool = False) -> dict:
        out = {"account_id": self.account_id}
        if self.mnemonic is not None:
            out["mnemonic"] = self.mnemonic
        out["path"] = self.path
        out["xpub"] = self.xpub
        if include_private:
            out["xprv"] = self.xprv
        return out


def _report(mnemonic: Mnemonic, settings: Settings, include_phrase: bool) -> KeyReport:
    bech32_codec.check_hrp(settings.hrp)
    with derive_seed(mnemonic, settings.password) as seed, derive_path(
        seed, settings.path
    ) as key:
        xprv = encode_extended_key(key, KeyVariant.PRIVATE)
        xpub = encode_extended_key(key, KeyVariant.PUBLIC)
        with signing_key(key) as sk:
            account = sk.account_id(settings.hrp)
    return KeyReport(
        account_id=str(account),
        path=str(settings.path),
        xpub=xpub,
        xprv=xprv,
        mnemonic=mnemonic.phrase if include_phrase else None,
    )


def generate_key(settings: Optional[Settings] = None) -> KeyReport:
    """Create a fresh mnemonic and report the account it controls."""
    settings = settings or Settings.from_env()
    mnemonic = new_mnemonic(settings.entropy_bits)
    return _report(mnemonic, settings, include_phrase=True)


def compute_key(phrase: Optional[str] = None, settings: Optional[Settings] = None) -> KeyReport:
    """Report the account controlled by an existing mnemonic."""
    settings = settings or Settings.from_env()
    phrase = phrase or settings.mnemonic
    if not phrase:
        raise MnemonicError("no mnemonic given (pass one or set GEVULOT_MNEMONIC)")
    return _report(mnemonic_codec.parse(phrase), settings, include_phrase=False)


@dataclass(frozen=True)
class BatchResult:
    index: int
    account: Optional[AccountId] = None
    error: Optional[KeyDerivationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _worker_derive_batch(args) -> List[BatchResult]:
    """Worker: derive the account id for each (index, phrase) in a batch."""
    batch, passphrase, path, hrp = args
    results = []
    for idx, phrase in batch:
        try:
            account, sk = derive_account(phrase, passphrase, path, hrp)
            sk.wipe()
            results.append(BatchResult(idx, account=account))
        except KeyDerivationError as e:
            results.append(BatchResult(idx, error=e))
    return results


def derive_batch(
    phrases: Iterable[str],
    passphrase: str = "",
    path: PathLike = DEFAULT_PATH,
    hrp: str = DEFAULT_HRP,
    workers: Optional[int] = None,
) -> List[BatchResult]:
    """Derive account ids for many phrases, in parallel when workers > 1.

    `workers` defaults to Settings.from_env().workers (GVLT_WORKERS). A
    phrase that fails yields a BatchResult carrying its error; the rest of
    the batch is unaffected. Results come back in input order.
    """
    if workers is None:
        workers = Settings.from_env().workers
    path = as_path(path)
    bech32_codec.check_hrp(hrp)
    indexed = list(enumerate(phrases))
    total = len(indexed)
    if workers <= 1 or total <= 1:
        return _worker_derive_batch((indexed, passphrase, path, hrp))

    batch_size = max(1, total // (workers * 4))
    batches = []
    for i in range(0, total, batch_size):
        batch = indexed[i : i + batch_size]
        batches.append((batch, passphrase, path, hrp))

    results = []
    with ProcessPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(_worker_derive_batch, b) for b in batches]
        for fut in as_completed(futures):
            results.extend(fut.result())
            logger.debug("derived %d/%d", len(results), total)

    results.sort(key=lambda r: r.index)
    return results

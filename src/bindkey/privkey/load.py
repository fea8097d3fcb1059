"""Top-level functions to load private key files."""

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from bindkey.common.config_misc import LoaderPolicy
from bindkey.common.data import DNSKEY_FLAG_COMBINATIONS
from bindkey.common.integrity import checksum_bytes2str
from bindkey.common.validate import PrivateKeyError
from bindkey.misc.crypto import CryptoProvider, get_crypto_provider
from bindkey.privkey.assemble import assemble_key
from bindkey.privkey.data import LoadResult, ParseStage, PrivateKeyRecord
from bindkey.privkey.parse_utils import fields_from_lines, parse_filename
from bindkey.privkey.validate import (
    FileUnreadable,
    KeyTagMismatch,
    check_key_format,
    validate_algorithm,
)

__author__ = "ft"


logger = logging.getLogger(__name__)


def read_key_file(filename: Path | str, max_size: int) -> list[str]:
    """
    Read all lines of a private key file, with newlines removed and empty lines skipped.

    The file is read in full and closed before any parsing is done.
    """
    try:
        with open(filename, "rb") as fd:
            file_size = os.fstat(fd.fileno()).st_size
            if file_size > max_size:
                raise FileUnreadable(
                    filename, f"file size {file_size} exceeds maximum of {max_size} bytes"
                )
            # impose upper limit on how much memory can be spent loading a file
            data = fd.read(max_size)
    except OSError as exc:
        raise FileUnreadable(filename, exc.strerror or str(exc)) from exc
    try:
        text = data.decode("ascii")
    except UnicodeDecodeError as exc:
        raise FileUnreadable(filename, f"not a text file ({exc.reason})") from exc
    logger.info("Loaded private key from file %s %s", filename, checksum_bytes2str(data))
    return [line for line in text.splitlines() if line]


def load_private_key(
    filename: Path | str,
    policy: LoaderPolicy | None = None,
    provider: CryptoProvider | None = None,
) -> PrivateKeyRecord:
    """Load a private key file written by dnssec-keygen."""
    return _load(filename, policy, provider, _Progress())


def private_key_from_lines(
    filename: Path | str,
    lines: Iterable[str],
    policy: LoaderPolicy | None = None,
    provider: CryptoProvider | None = None,
) -> PrivateKeyRecord:
    """
    Load a private key from lines read by the caller.

    The filename is still needed, since the signname, algorithm and key tag are
    taken from it.
    """
    return _load(filename, policy, provider, _Progress(), lines=lines)


def attempt_load_private_key(
    filename: Path | str,
    policy: LoaderPolicy | None = None,
    provider: CryptoProvider | None = None,
) -> LoadResult:
    """
    Load a private key file, returning the outcome instead of raising an exception.

    The error (if any) is one of the PrivateKeyError subclasses, and `reached' tells
    what stage the loading got to before it failed.
    """
    progress = _Progress()
    try:
        record = _load(filename, policy, provider, progress)
    except PrivateKeyError as exc:
        return LoadResult(
            filename=Path(filename), stage=ParseStage.FAILED, reached=progress.stage, error=exc
        )
    return LoadResult(
        filename=Path(filename),
        stage=ParseStage.ASSEMBLED,
        reached=ParseStage.ASSEMBLED,
        record=record,
    )


class _Progress:
    """Keeps track of the stages passed while loading a key."""

    def __init__(self) -> None:
        self.stage = ParseStage.UNPARSED

    def passed(self, stage: ParseStage, filename: Path | str) -> None:
        logger.debug(f"{filename}: {self.stage.name} -> {stage.name}")
        self.stage = stage


def _load(
    filename: Path | str,
    policy: LoaderPolicy | None,
    provider: CryptoProvider | None,
    progress: _Progress,
    lines: Iterable[str] | None = None,
) -> PrivateKeyRecord:
    if policy is None:
        policy = LoaderPolicy()
    try:
        if provider is None:
            provider = get_crypto_provider(policy.crypto_provider)

        keyname = parse_filename(filename)
        progress.passed(ParseStage.FILENAME_PARSED, filename)

        if lines is None:
            lines = read_key_file(filename, policy.max_file_size)
        fields = fields_from_lines(lines)
        progress.passed(ParseStage.CONTENT_PARSED, filename)

        validate_algorithm(keyname.algorithm, fields, policy.require_algorithm_field)
        check_key_format(fields, policy.accepted_key_formats)
        progress.passed(ParseStage.VALIDATED, filename)

        record = assemble_key(Path(filename), keyname, fields, provider)
        if policy.verify_key_tag:
            verify_key_tag(record)
        progress.passed(ParseStage.ASSEMBLED, filename)
    except PrivateKeyError as exc:
        if exc.filename is None:
            exc.filename = filename
        logger.debug(f"Failed loading private key after stage {progress.stage.name}: {exc}")
        raise
    logger.info(f"Loaded private key {record}")
    return record


def verify_key_tag(record: PrivateKeyRecord) -> None:
    """Check that the key tag in the filename matches the key's public parameters."""
    try:
        calculated = [record.to_dnskey(flags).key_tag for flags in DNSKEY_FLAG_COMBINATIONS]
    except ValueError as exc:
        raise KeyTagMismatch(record.keytag, []) from exc
    if record.keytag not in calculated:
        raise KeyTagMismatch(record.keytag, calculated)
    logger.debug(f"Verified key tag {record.keytag}")

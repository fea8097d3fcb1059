"""Checks applied to private key files, and the exceptions raised when they fail."""

import logging
import re
from collections.abc import Sequence
from pathlib import Path

from bindkey.common.data import AlgorithmFamily
from bindkey.common.validate import PrivateKeyError
from bindkey.privkey.data import FAMILY_FIELDS, FAMILY_KINDS, ParsedFields

__author__ = "ft"


logger = logging.getLogger(__name__)


class FileUnreadable(PrivateKeyError):
    """The private key file could not be read."""

    def __init__(self, filename: Path | str, reason: str) -> None:
        super().__init__(f"Can't read private key file: {reason}", filename=filename)
        self.reason = reason


class MalformedFilename(PrivateKeyError):
    """The filename is not on the form K<signname>.+<algorithm>+<keytag>.private."""

    def __init__(self, filename: Path | str) -> None:
        super().__init__(
            f"File {Path(filename).name!r} does not look like a private key file",
            filename=filename,
        )


class EmptyKeyFile(PrivateKeyError):
    """The private key file has no content."""

    def __init__(self) -> None:
        super().__init__("Private key file is empty")


class MalformedLine(PrivateKeyError):
    """A line in the private key file is not on the form 'name: value'."""

    def __init__(self, lineno: int, line: str, reason: str) -> None:
        super().__init__(f"Line {lineno} {line!r}: {reason}")
        self.lineno = lineno
        self.line = line
        self.reason = reason


class AlgorithmMismatch(PrivateKeyError):
    """The algorithm in the file contents differs from the algorithm in the filename."""

    def __init__(self, filename_algorithm: int, content_algorithm: int | str) -> None:
        super().__init__(
            f"Algorithm mis-match! filename is {filename_algorithm}, "
            f"contents say {content_algorithm}"
        )
        self.filename_algorithm = filename_algorithm
        self.content_algorithm = content_algorithm


class MissingAlgorithmField(PrivateKeyError):
    """The file has no Algorithm line, and the configuration requires one."""

    def __init__(self) -> None:
        super().__init__("Private key file has no Algorithm field")


class UnknownField(PrivateKeyError):
    """A field name in the private key file is not recognized."""

    def __init__(self, field: str, value: str) -> None:
        super().__init__(f"Unknown private key data: {field}: {value}")
        self.field = field
        self.value = value


class UnsupportedAlgorithm(PrivateKeyError):
    """The algorithm is not in any of the families we can load keys for."""

    def __init__(self, algorithm: int) -> None:
        _families = " and ".join(this.value for this in AlgorithmFamily)
        super().__init__(
            f"Unsupported algorithm {algorithm}, only {_families} private keys are supported"
        )
        self.algorithm = algorithm


class IncompleteParameterSet(PrivateKeyError):
    """Fields required by the key's algorithm family are missing."""

    def __init__(self, family: AlgorithmFamily, missing: Sequence[str]) -> None:
        super().__init__(
            f"Incomplete {family.value} private key, missing field(s): {', '.join(missing)}"
        )
        self.family = family
        self.missing = list(missing)


class InvalidFieldValue(PrivateKeyError):
    """A key parameter is not valid base64."""

    def __init__(self, field: str, value: str, reason: str) -> None:
        super().__init__(f"Invalid value for field {field!r}: {reason}")
        self.field = field
        self.value = value


class UnsupportedKeyFormat(PrivateKeyError):
    """The Private-key-format is not one of the accepted versions."""

    def __init__(self, key_format: str | None, accepted: Sequence[str]) -> None:
        super().__init__(
            f"Private-key-format {key_format} not accepted (accepted: {', '.join(accepted)})"
        )
        self.key_format = key_format


class KeyTagMismatch(PrivateKeyError):
    """The key tag in the filename does not match the key."""

    def __init__(self, keytag: int, calculated: Sequence[int]) -> None:
        super().__init__(
            f"Key tag {keytag} in filename does not match the key (calculated {list(calculated)})"
        )
        self.keytag = keytag
        self.calculated = list(calculated)


_LEADING_INT = re.compile(r"^(\d+)")


def validate_algorithm(
    filename_algorithm: int, fields: ParsedFields, require_field: bool = False
) -> None:
    """
    Check that the algorithm in the file contents matches the one in the filename.

    BIND writes the algorithm as e.g. 'Algorithm: 8 (RSASHA256)', so only the
    leading number is compared. A file without an Algorithm line is accepted
    unless `require_field' is set, and the filename algorithm is used.
    """
    value = fields.algorithm
    if value is None:
        if require_field:
            raise MissingAlgorithmField()
        logger.debug(f"No Algorithm field, using algorithm {filename_algorithm} from filename")
        return
    m = _LEADING_INT.match(value)
    if not m:
        raise AlgorithmMismatch(filename_algorithm, value)
    content_algorithm = int(m.group(1))
    if content_algorithm != filename_algorithm:
        raise AlgorithmMismatch(filename_algorithm, content_algorithm)


def check_key_format(fields: ParsedFields, accepted: Sequence[str]) -> None:
    """Check the Private-key-format against a list of accepted versions (empty list accepts all)."""
    if accepted and fields.private_key_format not in accepted:
        raise UnsupportedKeyFormat(fields.private_key_format, accepted)


def check_family_fields(fields: ParsedFields, family: AlgorithmFamily) -> None:
    """
    Check that all the fields of an algorithm family are present.

    Missing fields raise IncompleteParameterSet. Fields belonging to the other family
    are not part of the key and are ignored.
    """
    for other, kind in FAMILY_KINDS.items():
        if other == family:
            continue
        extra = fields.present(kind)
        if extra:
            logger.debug(
                f"Ignoring {other.value} field(s) in {family.value} private key: "
                f"{', '.join(this.value for this in extra)}"
            )

    missing = [this.value for this in FAMILY_FIELDS[family] if fields.get(this) is None]
    if missing:
        raise IncompleteParameterSet(family, missing)

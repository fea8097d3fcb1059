"""Data classes for parsed private key files."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Self

from pydantic import Field, model_validator

from bindkey.common.data import (
    AlgorithmDNSSEC,
    AlgorithmFamily,
    FrozenBaseModel,
    FrozenStrictBaseModel,
    Key,
    algorithm_family,
    algorithm_from_int,
)
from bindkey.common.dnssec import public_key_to_dnssec_key
from bindkey.common.dsa_utils import encode_dsa_public_key
from bindkey.common.rsa_utils import encode_rsa_public_key
from bindkey.common.validate import PrivateKeyError

__author__ = "ft"


class FieldKind(Enum):
    """What a field in a private key file describes."""

    FORMAT_VERSION = "format_version"
    ALGORITHM = "algorithm"
    RSA = "rsa"
    DSA = "dsa"


class KeyFileField(Enum):
    """
    The field names recognized in a private key file, in lower case.

    This is the complete set. Any other field name in a file is an error.
    """

    PRIVATE_KEY_FORMAT = "private-key-format"
    ALGORITHM = "algorithm"
    # RSA
    MODULUS = "modulus"
    PUBLIC_EXPONENT = "publicexponent"
    PRIVATE_EXPONENT = "privateexponent"
    PRIME1 = "prime1"
    PRIME2 = "prime2"
    EXPONENT1 = "exponent1"
    EXPONENT2 = "exponent2"
    COEFFICIENT = "coefficient"
    # DSA
    PRIME = "prime(p)"
    SUBPRIME = "subprime(q)"
    BASE = "base(g)"
    PRIVATE_VALUE = "private_value(x)"
    PUBLIC_VALUE = "public_value(y)"

    @property
    def slot(self) -> str:
        """Name of the attribute holding this field in ParsedFields."""
        return self.name.lower()

    @property
    def kind(self) -> FieldKind:
        return _FIELD_KINDS[self]


# RSA fields, in the order of the RSA parameters n, e, d, p, q, dmp1, dmq1, iqmp
RSA_FIELDS = (
    KeyFileField.MODULUS,
    KeyFileField.PUBLIC_EXPONENT,
    KeyFileField.PRIVATE_EXPONENT,
    KeyFileField.PRIME1,
    KeyFileField.PRIME2,
    KeyFileField.EXPONENT1,
    KeyFileField.EXPONENT2,
    KeyFileField.COEFFICIENT,
)

# DSA fields, in the order of the DSA parameters p, q, g, priv_key, pub_key
DSA_FIELDS = (
    KeyFileField.PRIME,
    KeyFileField.SUBPRIME,
    KeyFileField.BASE,
    KeyFileField.PRIVATE_VALUE,
    KeyFileField.PUBLIC_VALUE,
)

FAMILY_FIELDS: Mapping[AlgorithmFamily, tuple[KeyFileField, ...]] = {
    AlgorithmFamily.RSA: RSA_FIELDS,
    AlgorithmFamily.DSA: DSA_FIELDS,
}

FAMILY_KINDS: Mapping[AlgorithmFamily, FieldKind] = {
    AlgorithmFamily.RSA: FieldKind.RSA,
    AlgorithmFamily.DSA: FieldKind.DSA,
}

_FIELD_KINDS: dict[KeyFileField, FieldKind] = {
    KeyFileField.PRIVATE_KEY_FORMAT: FieldKind.FORMAT_VERSION,
    KeyFileField.ALGORITHM: FieldKind.ALGORITHM,
    **{this: FieldKind.RSA for this in RSA_FIELDS},
    **{this: FieldKind.DSA for this in DSA_FIELDS},
}


class KeyFilename(FrozenStrictBaseModel):
    """The values encoded in a private key filename (K<signname>.+<alg>+<keytag>.private)."""

    signname: str
    algorithm: int
    keytag: int


class ParsedFields(FrozenStrictBaseModel):
    """The raw (string) values of the fields found in a private key file."""

    private_key_format: str | None = None
    algorithm: str | None = None
    # RSA
    modulus: str | None = None
    public_exponent: str | None = None
    private_exponent: str | None = None
    prime1: str | None = None
    prime2: str | None = None
    exponent1: str | None = None
    exponent2: str | None = None
    coefficient: str | None = None
    # DSA
    prime: str | None = None
    subprime: str | None = None
    base: str | None = None
    private_value: str | None = None
    public_value: str | None = None

    @classmethod
    def from_mapping(cls, fields: Mapping[str, str]) -> Self:
        """
        Populate the slots from a mapping of lower case field name to value.

        Raises UnknownField for names not in KeyFileField.
        """
        # have to import this locally to avoid circular imports
        from bindkey.privkey.validate import UnknownField

        values: dict[str, str] = {}
        for name, value in fields.items():
            try:
                field = KeyFileField(name)
            except ValueError:
                raise UnknownField(name, value) from None
            values[field.slot] = value
        return cls(**values)

    def get(self, field: KeyFileField) -> str | None:
        """Return the value of a field, or None if it was not present in the file."""
        value: str | None = getattr(self, field.slot)
        return value

    def present(self, kind: FieldKind) -> list[KeyFileField]:
        """Return the fields of a certain kind that were present in the file."""
        return [
            this for this in KeyFileField if this.kind == kind and self.get(this) is not None
        ]


class RSAParameters(FrozenStrictBaseModel):
    """Decoded RSA private key parameters (big-endian bytes)."""

    n: bytes
    e: bytes
    d: bytes = Field(repr=False)
    p: bytes = Field(repr=False)
    q: bytes = Field(repr=False)
    dmp1: bytes = Field(repr=False)
    dmq1: bytes = Field(repr=False)
    iqmp: bytes = Field(repr=False)

    @property
    def bits(self) -> int:
        return int.from_bytes(self.n, byteorder="big").bit_length()

    def encode_public_key(self) -> bytes:
        return encode_rsa_public_key(self.e, self.n)


class DSAParameters(FrozenStrictBaseModel):
    """Decoded DSA private key parameters (big-endian bytes)."""

    p: bytes
    q: bytes
    g: bytes
    priv_key: bytes = Field(repr=False)
    pub_key: bytes

    @property
    def bits(self) -> int:
        return int.from_bytes(self.p, byteorder="big").bit_length()

    def encode_public_key(self) -> bytes:
        return encode_dsa_public_key(self.p, self.q, self.g, self.pub_key)


KeyParameters = RSAParameters | DSAParameters


class PrivateKeyRecord(FrozenBaseModel):
    """A fully loaded private key."""

    filename: Path
    signname: str
    algorithm: int
    keytag: int
    key_format: str | None = None
    rsa: RSAParameters | None = None
    dsa: DSAParameters | None = None
    key_handle: Any = Field(repr=False)

    @model_validator(mode="after")
    def check_parameter_set(self) -> Self:
        family = algorithm_family(self.algorithm)
        if family is None:
            raise ValueError(f"Algorithm {self.algorithm} has no known key parameters")
        if (self.rsa is not None) == (self.dsa is not None):
            raise ValueError("Exactly one of the RSA and DSA parameter sets must be set")
        if family == AlgorithmFamily.RSA and self.rsa is None:
            raise ValueError(f"Algorithm {self.algorithm} requires RSA parameters")
        if family == AlgorithmFamily.DSA and self.dsa is None:
            raise ValueError(f"Algorithm {self.algorithm} requires DSA parameters")
        if self.key_handle is None:
            raise ValueError("A private key record must have a key handle")
        return self

    def __str__(self) -> str:
        return (
            f"signname={self.signname or '.'} alg={self.algorithm_dnssec.name} "
            f"keytag={self.keytag} bits={self.bits} format={self.key_format}"
        )

    @property
    def algorithm_dnssec(self) -> AlgorithmDNSSEC:
        alg = algorithm_from_int(self.algorithm)
        assert alg is not None  # checked in check_parameter_set
        return alg

    @property
    def family(self) -> AlgorithmFamily:
        return AlgorithmFamily.RSA if self.rsa is not None else AlgorithmFamily.DSA

    @property
    def parameters(self) -> KeyParameters:
        _params = self.rsa if self.rsa is not None else self.dsa
        assert _params is not None  # checked in check_parameter_set
        return _params

    @property
    def bits(self) -> int:
        return self.parameters.bits

    def public_key(self) -> bytes:
        """Return the public key in base64 encoded DNSKEY form."""
        return self.parameters.encode_public_key()

    def to_dnskey(self, flags: int, ttl: int = 0) -> Key:
        """Return the DNSKEY for this private key, with the key tag calculated."""
        return public_key_to_dnssec_key(
            pubkey=self.public_key(),
            key_identifier=self.filename.name,
            algorithm=self.algorithm_dnssec,
            ttl=ttl,
            flags=flags,
        )


class ParseStage(Enum):
    """The stages a private key file goes through when loaded."""

    UNPARSED = "unparsed"
    FILENAME_PARSED = "filename_parsed"
    CONTENT_PARSED = "content_parsed"
    VALIDATED = "validated"
    ASSEMBLED = "assembled"
    FAILED = "failed"


@dataclass(frozen=True)
class LoadResult:
    """The outcome of an attempt to load a private key file."""

    filename: Path
    stage: ParseStage
    # the last stage completed before the attempt ended
    reached: ParseStage
    record: PrivateKeyRecord | None = None
    error: PrivateKeyError | None = None

    @property
    def ok(self) -> bool:
        return self.record is not None

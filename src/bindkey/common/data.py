"""Data classes and enumerations shared by the private key loader and the tools."""

from abc import ABC
from enum import Enum
from typing import TYPE_CHECKING, Any, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FrozenBaseModel(BaseModel, ABC):
    """
    A frozen abstract base class for Pydantic models.

    This variant allows coercion of data - used when loading configuration objects to e.g.
    get paths loaded transparently from strings.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")


class FrozenStrictBaseModel(BaseModel, ABC):
    """
    A frozen *strict* abstract base class for Pydantic models.

    This variant does NOT allow coercion of data - used for parsed key material.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", strict=True)


class AlgorithmDNSSEC(Enum):
    """
    DNSSEC Algorithms.

    https://www.iana.org/assignments/dns-sec-alg-numbers/dns-sec-alg-numbers.xhtml
    """

    RSAMD5 = 1
    DSA = 3
    RSASHA1 = 5
    DSA_NSEC3_SHA1 = 6
    RSASHA1_NSEC3_SHA1 = 7
    RSASHA256 = 8
    RSASHA512 = 10
    ECC_GOST = 12
    ECDSAP256SHA256 = 13
    ECDSAP384SHA384 = 14
    ED25519 = 15
    ED448 = 16


class AlgorithmFamily(Enum):
    """Groups of DNSSEC algorithms sharing the same private key parameters."""

    RSA = "RSA"
    DSA = "DSA"


# Algorithms using the RSA private key parameters (modulus, exponents, primes etc.)
RSA_ALGORITHMS = [
    AlgorithmDNSSEC.RSAMD5,
    AlgorithmDNSSEC.RSASHA1,
    AlgorithmDNSSEC.RSASHA1_NSEC3_SHA1,
    AlgorithmDNSSEC.RSASHA256,
    AlgorithmDNSSEC.RSASHA512,
]

# Algorithms using the DSA private key parameters (p, q, g, x and y)
DSA_ALGORITHMS = [
    AlgorithmDNSSEC.DSA,
    AlgorithmDNSSEC.DSA_NSEC3_SHA1,
]


def algorithm_from_int(value: int) -> AlgorithmDNSSEC | None:
    """Return the AlgorithmDNSSEC for a numeric algorithm, or None if the number is unknown."""
    try:
        return AlgorithmDNSSEC(value)
    except ValueError:
        return None


def algorithm_family(value: int | AlgorithmDNSSEC) -> AlgorithmFamily | None:
    """Return the key parameter family of an algorithm, or None for algorithms we can't load."""
    alg = value if isinstance(value, AlgorithmDNSSEC) else algorithm_from_int(value)
    if alg in RSA_ALGORITHMS:
        return AlgorithmFamily.RSA
    if alg in DSA_ALGORITHMS:
        return AlgorithmFamily.DSA
    return None


class FlagsDNSKEY(Enum):
    """DNSKEY flags."""

    SEP = 0x0001
    REVOKE = 0x0080
    ZONE = 0x0100


# The flag combinations a key generated by dnssec-keygen can have
DNSKEY_FLAG_COMBINATIONS = [
    FlagsDNSKEY.ZONE.value,
    FlagsDNSKEY.ZONE.value | FlagsDNSKEY.SEP.value,
    FlagsDNSKEY.ZONE.value | FlagsDNSKEY.SEP.value | FlagsDNSKEY.REVOKE.value,
]


class Key(FrozenStrictBaseModel):
    """DNSKEY parameters."""

    if TYPE_CHECKING:
        # A frozen BaseModel will get a __hash__ function, but Pylance currently misses this
        def __hash__(self) -> int: ...

    key_identifier: str
    key_tag: int
    ttl: int
    flags: int
    protocol: int
    algorithm: AlgorithmDNSSEC
    public_key: bytes = Field(repr=False)

    @field_validator("flags", mode="after")
    @classmethod
    def validate_flags(cls, flags: int) -> int:
        if flags in DNSKEY_FLAG_COMBINATIONS:
            return flags
        raise ValueError(f"Unsupported DNSSEC key flags combination {flags}")

    def replace(self, **kwargs: Any) -> Self:
        """Return a new instance with the provided attributes updated. Used in tests."""
        return self.model_copy(update=kwargs)

    def to_text(self, owner: str) -> str:
        """Return the key in DNS presentation format."""
        if not owner.endswith("."):
            owner += "."
        return (
            f"{owner} {self.ttl} IN DNSKEY {self.flags} {self.protocol} "
            f"{self.algorithm.value} {self.public_key.decode()}"
        )

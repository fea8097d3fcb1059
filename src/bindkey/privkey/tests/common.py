"""Key material and key file helpers shared by the private key tests."""

import base64
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from cryptography.hazmat.primitives.asymmetric import dsa, rsa

from bindkey.common.data import AlgorithmDNSSEC, AlgorithmFamily, FlagsDNSKEY
from bindkey.common.dnssec import public_key_to_dnssec_key
from bindkey.common.dsa_utils import encode_dsa_public_key
from bindkey.common.rsa_utils import encode_rsa_public_key, int_to_bytes
from bindkey.misc.crypto import CryptoProvider
from bindkey.privkey.data import KeyParameters


def b64(value: int) -> str:
    """Encode an integer the way dnssec-keygen does (shortest big-endian bytes, base64)."""
    return base64.b64encode(int_to_bytes(value)).decode()


@lru_cache(maxsize=None)
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@lru_cache(maxsize=None)
def dsa_key() -> dsa.DSAPrivateKey:
    return dsa.generate_private_key(key_size=1024)


def rsa_lines(
    algorithm: AlgorithmDNSSEC = AlgorithmDNSSEC.RSASHA256,
    key_format: str | None = "v1.3",
    with_algorithm: bool = True,
) -> list[str]:
    """Return the lines of an RSA private key file as written by dnssec-keygen."""
    numbers = rsa_key().private_numbers()
    res = []
    if key_format is not None:
        res += [f"Private-key-format: {key_format}"]
    if with_algorithm:
        res += [f"Algorithm: {algorithm.value} ({algorithm.name})"]
    res += [
        f"Modulus: {b64(numbers.public_numbers.n)}",
        f"PublicExponent: {b64(numbers.public_numbers.e)}",
        f"PrivateExponent: {b64(numbers.d)}",
        f"Prime1: {b64(numbers.p)}",
        f"Prime2: {b64(numbers.q)}",
        f"Exponent1: {b64(numbers.dmp1)}",
        f"Exponent2: {b64(numbers.dmq1)}",
        f"Coefficient: {b64(numbers.iqmp)}",
    ]
    return res


def dsa_lines(
    algorithm: AlgorithmDNSSEC = AlgorithmDNSSEC.DSA, key_format: str | None = "v1.2"
) -> list[str]:
    """Return the lines of a DSA private key file as written by dnssec-keygen."""
    numbers = dsa_key().private_numbers()
    params = numbers.public_numbers.parameter_numbers
    res = []
    if key_format is not None:
        res += [f"Private-key-format: {key_format}"]
    res += [
        f"Algorithm: {algorithm.value} ({algorithm.name})",
        f"Prime(p): {b64(params.p)}",
        f"Subprime(q): {b64(params.q)}",
        f"Base(g): {b64(params.g)}",
        f"Private_value(x): {b64(numbers.x)}",
        f"Public_value(y): {b64(numbers.public_numbers.y)}",
    ]
    return res


def rsa_key_tag(algorithm: AlgorithmDNSSEC, flags: int = FlagsDNSKEY.ZONE.value) -> int:
    """Calculate the key tag dnssec-keygen would have put in the filename of the RSA test key."""
    public = rsa_key().public_key().public_numbers()
    pubkey = encode_rsa_public_key(int_to_bytes(public.e), int_to_bytes(public.n))
    return public_key_to_dnssec_key(pubkey, "test", algorithm, 0, flags).key_tag


def dsa_key_tag(algorithm: AlgorithmDNSSEC, flags: int = FlagsDNSKEY.ZONE.value) -> int:
    """Calculate the key tag dnssec-keygen would have put in the filename of the DSA test key."""
    public = dsa_key().public_key().public_numbers()
    params = public.parameter_numbers
    pubkey = encode_dsa_public_key(
        int_to_bytes(params.p), int_to_bytes(params.q), int_to_bytes(params.g), int_to_bytes(public.y)
    )
    return public_key_to_dnssec_key(pubkey, "test", algorithm, 0, flags).key_tag


def key_filename(signname: str, algorithm: int, keytag: int) -> str:
    return f"K{signname}.+{algorithm:03d}+{keytag}.private"


def write_key_file(directory: Path | str, filename: str, lines: list[str]) -> Path:
    """Write a private key file, and return the path to it."""
    path = Path(directory, filename)
    with open(path, "w") as fd:
        fd.write("\n".join(lines) + "\n")
    os.chmod(path, 0o600)
    return path


class FailingProvider(CryptoProvider):
    """Crypto provider whose backend raises its own exceptions."""

    name = "failing"

    def construct_key(self, family: AlgorithmFamily, parameters: KeyParameters) -> Any:
        raise RuntimeError("hsm said no")


class NoKeyProvider(CryptoProvider):
    """Crypto provider that does not return a key."""

    name = "nokey"

    def construct_key(self, family: AlgorithmFamily, parameters: KeyParameters) -> Any:
        return None

"""Various functions relating to the DSA algorithm."""

import base64

from bindkey.common.data import DSA_ALGORITHMS, AlgorithmDNSSEC

__author__ = "ft"


def is_algorithm_dsa(alg: AlgorithmDNSSEC) -> bool:
    """Check if `alg' is one of the DSA algorithms."""
    return alg in DSA_ALGORITHMS


def encode_dsa_public_key(
    prime: bytes, subprime: bytes, base: bytes, public_value: bytes
) -> bytes:
    """
    Encode a DSA public key into base64 encoded DNSKEY public key form.

    The layout is specified in RFC 2536, section 2:

        T (1 octet) | Q (20 octets) | P (64 + T*8 octets) | G | Y

    where G and Y are padded to the same length as P.
    """
    _p = int.from_bytes(prime, byteorder="big")
    size = (_p.bit_length() + 7) // 8
    if size < 64 or size > 128 or size % 8:
        raise ValueError(f"DSA prime of {size} octets can't be encoded in a DNSKEY")
    t = (size - 64) // 8
    _q = int.from_bytes(subprime, byteorder="big")
    if _q.bit_length() > 160:
        raise ValueError("DSA subprime larger than 160 bits can't be encoded in a DNSKEY")
    res = bytes([t]) + _q.to_bytes(20, byteorder="big")
    for this in (prime, base, public_value):
        res += int.from_bytes(this, byteorder="big").to_bytes(size, byteorder="big")
    return base64.b64encode(res)

"""Various functions relating to the RSA algorithm."""

import base64
import math
import struct

from bindkey.common.data import RSA_ALGORITHMS, AlgorithmDNSSEC

__author__ = "ft"


def is_algorithm_rsa(alg: AlgorithmDNSSEC) -> bool:
    """Check if `alg' is one of the known RSA algorithms."""
    return alg in RSA_ALGORITHMS


def int_to_bytes(value: int) -> bytes:
    """Return the shortest big-endian representation of a non-negative integer."""
    return int.to_bytes(value, length=math.ceil(value.bit_length() / 8), byteorder="big")


def encode_rsa_public_key(exponent: bytes, modulus: bytes) -> bytes:
    """
    Encode an RSA public key into base64 encoded DNSKEY public key form.

    This is specified in RFC 3110, section 2. Leading zero octets are removed
    from both the exponent and the modulus.
    """
    exp = int_to_bytes(int.from_bytes(exponent, byteorder="big"))
    n = int_to_bytes(int.from_bytes(modulus, byteorder="big"))
    if len(exp) > 255:
        # A value larger than 255 can't be represented using a single byte. Use long variant
        # of encoding, which is a zero byte followed by the value in two bytes.
        exp_header = b"\0" + struct.pack("!H", len(exp))
    else:
        exp_header = struct.pack("!B", len(exp))
    return base64.b64encode(exp_header + exp + n)

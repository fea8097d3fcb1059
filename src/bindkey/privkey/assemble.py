"""Assemble decoded key parameters from parsed fields, and have a crypto provider construct the key."""

import base64
import binascii
import logging
from pathlib import Path

from bindkey.common.data import AlgorithmFamily, algorithm_from_int
from bindkey.common.dsa_utils import is_algorithm_dsa
from bindkey.common.rsa_utils import is_algorithm_rsa
from bindkey.common.validate import KeyConstructionFailed, PrivateKeyError
from bindkey.misc.crypto import CryptoProvider
from bindkey.privkey.data import (
    FAMILY_KINDS,
    DSAParameters,
    KeyFileField,
    KeyFilename,
    KeyParameters,
    ParsedFields,
    PrivateKeyRecord,
    RSAParameters,
)
from bindkey.privkey.validate import (
    IncompleteParameterSet,
    InvalidFieldValue,
    UnsupportedAlgorithm,
    check_family_fields,
)

__author__ = "ft"


logger = logging.getLogger(__name__)


def _decode(fields: ParsedFields, field: KeyFileField) -> bytes:
    value = fields.get(field)
    if value is None:
        # check_family_fields should have caught this already
        family = next(fam for fam, kind in FAMILY_KINDS.items() if kind == field.kind)
        raise IncompleteParameterSet(family, [field.value])
    try:
        return base64.b64decode(value, validate=True)
    except binascii.Error as exc:
        raise InvalidFieldValue(field.value, value, f"not valid base64 ({exc})") from exc


def rsa_parameters_from_fields(fields: ParsedFields) -> RSAParameters:
    """Decode the RSA fields into the parameters n, e, d, p, q, dmp1, dmq1 and iqmp."""
    return RSAParameters(
        n=_decode(fields, KeyFileField.MODULUS),
        e=_decode(fields, KeyFileField.PUBLIC_EXPONENT),
        d=_decode(fields, KeyFileField.PRIVATE_EXPONENT),
        p=_decode(fields, KeyFileField.PRIME1),
        q=_decode(fields, KeyFileField.PRIME2),
        dmp1=_decode(fields, KeyFileField.EXPONENT1),
        dmq1=_decode(fields, KeyFileField.EXPONENT2),
        iqmp=_decode(fields, KeyFileField.COEFFICIENT),
    )


def dsa_parameters_from_fields(fields: ParsedFields) -> DSAParameters:
    """Decode the DSA fields into the parameters p, q, g, priv_key and pub_key."""
    return DSAParameters(
        p=_decode(fields, KeyFileField.PRIME),
        q=_decode(fields, KeyFileField.SUBPRIME),
        g=_decode(fields, KeyFileField.BASE),
        priv_key=_decode(fields, KeyFileField.PRIVATE_VALUE),
        pub_key=_decode(fields, KeyFileField.PUBLIC_VALUE),
    )


def assemble_parameters(fields: ParsedFields, algorithm: int) -> KeyParameters:
    """Select the algorithm family and decode the parameters for it."""
    alg = algorithm_from_int(algorithm)
    if alg is not None and is_algorithm_rsa(alg):
        family = AlgorithmFamily.RSA
    elif alg is not None and is_algorithm_dsa(alg):
        family = AlgorithmFamily.DSA
    else:
        raise UnsupportedAlgorithm(algorithm)
    check_family_fields(fields, family)
    if family == AlgorithmFamily.RSA:
        return rsa_parameters_from_fields(fields)
    return dsa_parameters_from_fields(fields)


def assemble_key(
    filename: Path,
    keyname: KeyFilename,
    fields: ParsedFields,
    provider: CryptoProvider,
) -> PrivateKeyRecord:
    """Construct the key using the crypto provider, and return the complete record."""
    parameters = assemble_parameters(fields, keyname.algorithm)
    family = AlgorithmFamily.RSA if isinstance(parameters, RSAParameters) else AlgorithmFamily.DSA
    logger.debug(
        f"Constructing {family.value} key ({parameters.bits} bits) using provider {provider.name}"
    )
    try:
        key_handle = provider.construct_key(family, parameters)
    except PrivateKeyError:
        raise
    except Exception as exc:
        raise KeyConstructionFailed(str(exc)) from exc
    if key_handle is None:
        raise KeyConstructionFailed(f"Crypto provider {provider.name} returned no key")
    return PrivateKeyRecord(
        filename=filename,
        signname=keyname.signname,
        algorithm=keyname.algorithm,
        keytag=keyname.keytag,
        key_format=fields.private_key_format,
        rsa=parameters if isinstance(parameters, RSAParameters) else None,
        dsa=parameters if isinstance(parameters, DSAParameters) else None,
        key_handle=key_handle,
    )

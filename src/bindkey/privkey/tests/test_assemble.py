import base64
import unittest
from pathlib import Path
from typing import Any

import pytest
from cryptography.hazmat.primitives.asymmetric import dsa, rsa

from bindkey.common.data import AlgorithmFamily
from bindkey.common.validate import KeyConstructionFailed
from bindkey.misc.crypto import CryptographyProvider, CryptoProvider
from bindkey.privkey.assemble import assemble_key, assemble_parameters
from bindkey.privkey.data import DSAParameters, KeyFilename, KeyParameters, RSAParameters
from bindkey.privkey.parse_utils import fields_from_lines
from bindkey.privkey.tests.common import (
    FailingProvider,
    NoKeyProvider,
    b64,
    dsa_key,
    dsa_lines,
    rsa_key,
    rsa_lines,
)
from bindkey.privkey.validate import (
    IncompleteParameterSet,
    InvalidFieldValue,
    UnsupportedAlgorithm,
)


class RecordingProvider(CryptoProvider):
    """Crypto provider remembering what it was asked to construct."""

    name = "recording"

    def __init__(self) -> None:
        self.calls: list[tuple[AlgorithmFamily, KeyParameters]] = []

    def construct_key(self, family: AlgorithmFamily, parameters: KeyParameters) -> Any:
        self.calls += [(family, parameters)]
        return object()


class TestAssembleParameters(unittest.TestCase):
    def test_rsa(self) -> None:
        """Test that the decoded RSA parameters are exactly the values encoded in the file"""
        params = assemble_parameters(fields_from_lines(rsa_lines()), 8)
        assert isinstance(params, RSAParameters)
        numbers = rsa_key().private_numbers()
        self.assertEqual(int.from_bytes(params.n, "big"), numbers.public_numbers.n)
        self.assertEqual(int.from_bytes(params.e, "big"), 65537)
        self.assertEqual(int.from_bytes(params.d, "big"), numbers.d)
        self.assertEqual(int.from_bytes(params.p, "big"), numbers.p)
        self.assertEqual(int.from_bytes(params.q, "big"), numbers.q)
        self.assertEqual(int.from_bytes(params.dmp1, "big"), numbers.dmp1)
        self.assertEqual(int.from_bytes(params.dmq1, "big"), numbers.dmq1)
        self.assertEqual(int.from_bytes(params.iqmp, "big"), numbers.iqmp)
        self.assertEqual(params.bits, 2048)

    def test_rsa_bytes_preserved(self) -> None:
        """Test that decoding does not alter the bytes (e.g. leading zeros)"""
        raw = {"modulus": b"\x00\x01\x02\xff", "publicexponent": b"\x01\x00\x01"}
        lines = [f"{name}: {base64.b64encode(value).decode()}" for name, value in raw.items()]
        lines += [f"{name}: {b64(3)}" for name in
                  ["PrivateExponent", "Prime1", "Prime2", "Exponent1", "Exponent2", "Coefficient"]]
        params = assemble_parameters(fields_from_lines(lines), 5)
        assert isinstance(params, RSAParameters)
        self.assertEqual(params.n, b"\x00\x01\x02\xff")
        self.assertEqual(params.e, b"\x01\x00\x01")
        self.assertEqual(params.iqmp, b"\x03")

    def test_all_rsa_algorithms(self) -> None:
        fields = fields_from_lines(rsa_lines(with_algorithm=False))
        for alg in [1, 5, 7, 8, 10]:
            self.assertIsInstance(assemble_parameters(fields, alg), RSAParameters)

    def test_all_dsa_algorithms(self) -> None:
        fields = fields_from_lines(dsa_lines())
        for alg in [3, 6]:
            self.assertIsInstance(assemble_parameters(fields, alg), DSAParameters)

    def test_dsa(self) -> None:
        params = assemble_parameters(fields_from_lines(dsa_lines()), 3)
        assert isinstance(params, DSAParameters)
        numbers = dsa_key().private_numbers()
        self.assertEqual(int.from_bytes(params.p, "big"), numbers.public_numbers.parameter_numbers.p)
        self.assertEqual(int.from_bytes(params.priv_key, "big"), numbers.x)
        self.assertEqual(int.from_bytes(params.pub_key, "big"), numbers.public_numbers.y)
        self.assertEqual(params.bits, 1024)

    def test_unsupported_algorithm(self) -> None:
        """Test algorithms that are neither RSA nor DSA"""
        fields = fields_from_lines(rsa_lines(with_algorithm=False))
        for alg in [0, 2, 13, 15, 99, 253]:
            with pytest.raises(UnsupportedAlgorithm, match="RSA and DSA"):
                assemble_parameters(fields, alg)

    def test_incomplete(self) -> None:
        lines = [this for this in dsa_lines() if not this.startswith("Base(g)")]
        with pytest.raises(IncompleteParameterSet) as exc_info:
            assemble_parameters(fields_from_lines(lines), 3)
        self.assertEqual(exc_info.value.missing, ["base(g)"])

    def test_invalid_base64(self) -> None:
        lines = [this if not this.startswith("Prime1") else "Prime1: not*base64"
                 for this in rsa_lines()]
        with pytest.raises(InvalidFieldValue) as exc_info:
            assemble_parameters(fields_from_lines(lines), 8)
        self.assertEqual(exc_info.value.field, "prime1")


class TestAssembleKey(unittest.TestCase):
    def test_provider_called_with_bundle(self) -> None:
        provider = RecordingProvider()
        keyname = KeyFilename(signname="example.com", algorithm=8, keytag=4711)
        record = assemble_key(
            Path("Kexample.com.+008+04711.private"), keyname, fields_from_lines(rsa_lines()), provider
        )
        self.assertEqual(len(provider.calls), 1)
        family, params = provider.calls[0]
        self.assertEqual(family, AlgorithmFamily.RSA)
        self.assertEqual(params, record.rsa)
        self.assertIsNone(record.dsa)
        self.assertEqual(record.key_format, "v1.3")
        self.assertEqual(record.keytag, 4711)

    def test_rsa_key(self) -> None:
        keyname = KeyFilename(signname="example.com", algorithm=8, keytag=1)
        record = assemble_key(
            Path("x"), keyname, fields_from_lines(rsa_lines()), CryptographyProvider()
        )
        self.assertIsInstance(record.key_handle, rsa.RSAPrivateKey)
        self.assertEqual(
            record.key_handle.private_numbers(), rsa_key().private_numbers()
        )

    def test_dsa_key(self) -> None:
        keyname = KeyFilename(signname="example.com", algorithm=3, keytag=1)
        record = assemble_key(
            Path("x"), keyname, fields_from_lines(dsa_lines()), CryptographyProvider()
        )
        self.assertIsInstance(record.key_handle, dsa.DSAPrivateKey)
        self.assertEqual(record.family, AlgorithmFamily.DSA)

    def test_provider_rejects_key(self) -> None:
        """Test that inconsistent key parameters are reported with the provider's diagnostic"""
        lines = [this if not this.startswith("PublicExponent") else f"PublicExponent: {b64(3)}"
                 for this in rsa_lines()]
        keyname = KeyFilename(signname="example.com", algorithm=8, keytag=1)
        with pytest.raises(KeyConstructionFailed) as exc_info:
            assemble_key(Path("x"), keyname, fields_from_lines(lines), CryptographyProvider())
        self.assertTrue(exc_info.value.diagnostic)

    def test_provider_exception(self) -> None:
        """Test that errors from the provider backend are reported as KeyConstructionFailed"""
        keyname = KeyFilename(signname="example.com", algorithm=8, keytag=1)
        with pytest.raises(KeyConstructionFailed) as exc_info:
            assemble_key(Path("x"), keyname, fields_from_lines(rsa_lines()), FailingProvider())
        self.assertEqual(exc_info.value.diagnostic, "hsm said no")
        self.assertIsInstance(exc_info.value.__cause__, RuntimeError)

    def test_provider_returns_no_key(self) -> None:
        keyname = KeyFilename(signname="example.com", algorithm=3, keytag=1)
        with pytest.raises(KeyConstructionFailed, match="nokey returned no key"):
            assemble_key(Path("x"), keyname, fields_from_lines(dsa_lines()), NoKeyProvider())

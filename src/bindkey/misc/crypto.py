"""Crypto providers, turning decoded key parameters into usable private key objects."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import dsa, rsa

from bindkey.common.data import AlgorithmFamily
from bindkey.common.validate import KeyConstructionFailed, ProviderUnavailable

if TYPE_CHECKING:
    from bindkey.privkey.data import DSAParameters, KeyParameters, RSAParameters

__author__ = "ft"

logger = logging.getLogger(__name__)


CryptographyPrivateKey = rsa.RSAPrivateKey | dsa.DSAPrivateKey


class CryptoProvider(ABC):
    """Base class for crypto providers."""

    name: str = "abstract"

    def is_available(self) -> bool:
        """Check if the backend of this provider can be used in this runtime."""
        return True

    @abstractmethod
    def construct_key(self, family: AlgorithmFamily, parameters: KeyParameters) -> Any:
        """
        Construct a private key object from decoded key parameters.

        Raises KeyConstructionFailed if the parameters are rejected, and
        ProviderUnavailable if the backend can't handle the algorithm family.
        """
        pass


def _int(value: bytes) -> int:
    return int.from_bytes(value, byteorder="big")


class CryptographyProvider(CryptoProvider):
    """Crypto provider using the 'cryptography' library."""

    name = "cryptography"

    def construct_key(
        self, family: AlgorithmFamily, parameters: KeyParameters
    ) -> CryptographyPrivateKey:
        try:
            if family == AlgorithmFamily.RSA:
                return self._rsa_key(parameters)  # type: ignore[arg-type]
            if family == AlgorithmFamily.DSA:
                return self._dsa_key(parameters)  # type: ignore[arg-type]
        except UnsupportedAlgorithm as exc:
            raise ProviderUnavailable(self.name, str(exc)) from exc
        except (ValueError, TypeError) as exc:
            raise KeyConstructionFailed(str(exc)) from exc
        raise ProviderUnavailable(self.name, f"no support for {family.value} keys")

    @staticmethod
    def _rsa_key(parameters: RSAParameters) -> rsa.RSAPrivateKey:
        public = rsa.RSAPublicNumbers(e=_int(parameters.e), n=_int(parameters.n))
        numbers = rsa.RSAPrivateNumbers(
            p=_int(parameters.p),
            q=_int(parameters.q),
            d=_int(parameters.d),
            dmp1=_int(parameters.dmp1),
            dmq1=_int(parameters.dmq1),
            iqmp=_int(parameters.iqmp),
            public_numbers=public,
        )
        return numbers.private_key()

    @staticmethod
    def _dsa_key(parameters: DSAParameters) -> dsa.DSAPrivateKey:
        parameter_numbers = dsa.DSAParameterNumbers(
            p=_int(parameters.p), q=_int(parameters.q), g=_int(parameters.g)
        )
        public = dsa.DSAPublicNumbers(
            y=_int(parameters.pub_key), parameter_numbers=parameter_numbers
        )
        numbers = dsa.DSAPrivateNumbers(x=_int(parameters.priv_key), public_numbers=public)
        return numbers.private_key()


_PROVIDERS: dict[str, type[CryptoProvider]] = {
    CryptographyProvider.name: CryptographyProvider,
}


def register_crypto_provider(provider: type[CryptoProvider]) -> None:
    """Make a crypto provider available by name."""
    logger.debug(f"Registering crypto provider {provider.name}")
    _PROVIDERS[provider.name] = provider


def get_crypto_provider(name: str = CryptographyProvider.name) -> CryptoProvider:
    """Return an instance of a named crypto provider."""
    if name not in _PROVIDERS:
        raise ProviderUnavailable(name, "no such crypto provider")
    provider = _PROVIDERS[name]()
    if not provider.is_available():
        raise ProviderUnavailable(name, "backend not available")
    return provider

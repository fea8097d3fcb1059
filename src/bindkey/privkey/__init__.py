"""Sub-package dealing with DNSSEC private key files."""
from bindkey.common.validate import (  # noqa
    KeyConstructionFailed,
    PrivateKeyError,
    ProviderUnavailable,
)
from bindkey.privkey.data import LoadResult, ParseStage, PrivateKeyRecord  # noqa
from bindkey.privkey.load import (  # noqa
    attempt_load_private_key,
    load_private_key,
    private_key_from_lines,
)
from bindkey.privkey.validate import (  # noqa
    AlgorithmMismatch,
    EmptyKeyFile,
    FileUnreadable,
    IncompleteParameterSet,
    InvalidFieldValue,
    KeyTagMismatch,
    MalformedFilename,
    MalformedLine,
    MissingAlgorithmField,
    UnknownField,
    UnsupportedAlgorithm,
    UnsupportedKeyFormat,
)

__author__ = 'ft'

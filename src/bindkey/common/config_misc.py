"""Sub-parts of BindKeyConfig (in config.py)."""

from pathlib import Path
from typing import Annotated

from pydantic import Field, StringConstraints

from bindkey.common.data import FrozenBaseModel

__author__ = "ft"


KeyNameString = Annotated[str, StringConstraints(pattern=r"^[\w\-]+$")]
KeyFormatString = Annotated[str, StringConstraints(pattern=r"^v\d+\.\d+$")]

# dnssec-keygen output is a few kilobytes even for the largest RSA keys
DEFAULT_MAX_FILE_SIZE = 64 * 1024


class LoaderPolicy(FrozenBaseModel):
    """Configuration knobs for loading private key files."""

    crypto_provider: str = "cryptography"
    max_file_size: Annotated[int, Field(gt=0)] = DEFAULT_MAX_FILE_SIZE
    # Missing Algorithm lines are accepted by default, the filename is authoritative then
    require_algorithm_field: bool = False
    # An empty list accepts any Private-key-format
    accepted_key_formats: list[KeyFormatString] = Field(default_factory=list)
    verify_key_tag: bool = False


class KeyFileEntry(FrozenBaseModel):
    """A named private key file in the configuration."""

    filename: Path
    description: str = ""

"""Parse private key filenames and file contents."""

import logging
import os
import re
from collections.abc import Iterable
from pathlib import Path

from bindkey.privkey.data import KeyFileField, KeyFilename, ParsedFields
from bindkey.privkey.validate import EmptyKeyFile, MalformedFilename, MalformedLine, UnknownField

__author__ = "ft"


logger = logging.getLogger(__name__)

# K<signname>.+<algorithm>+<keytag>.private, as written by dnssec-keygen
_FILENAME_RE = re.compile(r"K(.*)\.\+(\d{3})\+(\d+)\.private")

_KNOWN_FIELDS = frozenset(this.value for this in KeyFileField)


def parse_filename(filename: Path | str) -> KeyFilename:
    """
    Extract signname, algorithm and key tag from the name of a private key file.

    Example: Kexample.com.+008+12345.private -> ('example.com', 8, 12345)
    """
    keyname = os.path.basename(filename)
    if not keyname:
        raise MalformedFilename(filename)
    m = _FILENAME_RE.fullmatch(keyname)
    if not m:
        raise MalformedFilename(filename)
    signname, algorithm, keytag = m.groups()
    return KeyFilename(signname=signname, algorithm=int(algorithm), keytag=int(keytag))


def parse_lines(lines: Iterable[str]) -> dict[str, str]:
    """
    Parse the lines of a private key file into a dict of lower case field name to value.

    Every non-blank line must be on the form 'name: value'. The order of the
    fields in the file is preserved.
    """
    res: dict[str, str] = {}
    for lineno, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        if line.count(":") != 1:
            raise MalformedLine(lineno, line, "expected exactly one ':' separator")
        _name, _value = line.split(":")
        name = _name.strip().lower()
        value = _value.strip()
        if not name:
            raise MalformedLine(lineno, line, "no field name before ':'")
        if not value:
            raise MalformedLine(lineno, line, "no value after ':'")
        if name not in _KNOWN_FIELDS:
            raise UnknownField(name, value)
        if name in res:
            raise MalformedLine(lineno, line, f"field {name!r} repeated")
        res[name] = value
    if not res:
        raise EmptyKeyFile()
    logger.debug(f"Parsed fields {list(res.keys())}")
    return res


def fields_from_lines(lines: Iterable[str]) -> ParsedFields:
    """Parse the lines of a private key file into a ParsedFields instance."""
    return ParsedFields.from_mapping(parse_lines(lines))

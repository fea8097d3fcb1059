"""
Private key file inspector.

  - load one or more private key files written by dnssec-keygen
  - check that they are consistent (algorithm, fields, key parameters)
  - print a summary line, and optionally the DNSKEY record, for each key
"""

import argparse
import logging
import os
import sys
from argparse import Namespace as ArgsType
from collections.abc import Sequence
from pathlib import Path

import yaml
from pydantic import ValidationError

from bindkey.common.config import BindKeyConfig, ConfigurationError, get_config
from bindkey.common.data import DNSKEY_FLAG_COMBINATIONS, FlagsDNSKEY
from bindkey.common.logging import get_logger
from bindkey.privkey import attempt_load_private_key
from bindkey.version import __verbose_version__

_DEFAULTS = {
    "debug": False,
    "config": None,
    "flags": FlagsDNSKEY.ZONE.value,
}


def parse_args(defaults: dict, argv: Sequence[str] | None = None) -> ArgsType:
    """
    Parse command line arguments.

    Key files can be given as arguments, or by name from the 'keys' section of the
    configuration file (--key).
    """
    parser = argparse.ArgumentParser(
        description=f"DNSSEC private key file inspector {__verbose_version__}",
        add_help=True,
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "files",
        metavar="KEYFILE",
        type=str,
        nargs="*",
        help="Private key file(s) to load",
    )

    # Optional arguments
    parser.add_argument(
        "--config",
        dest="config",
        metavar="CFGFILE",
        type=str,
        default=defaults["config"],
        help="Path to the configuration file",
    )
    parser.add_argument(
        "--key",
        dest="keys",
        metavar="NAME",
        type=str,
        action="append",
        default=[],
        help="Name of a key in the configuration file",
    )
    parser.add_argument(
        "--debug",
        dest="debug",
        action="store_true",
        default=defaults["debug"],
        help="Enable debug operation",
    )
    parser.add_argument(
        "--verify-key-tag",
        dest="verify_key_tag",
        action="store_true",
        default=False,
        help="Verify the key tag in the filename against the key",
    )
    parser.add_argument(
        "--dnskey",
        dest="dnskey",
        action="store_true",
        default=False,
        help="Print the DNSKEY record for each key",
    )
    parser.add_argument(
        "--flags",
        dest="flags",
        metavar="FLAGS",
        type=int,
        default=defaults["flags"],
        choices=DNSKEY_FLAG_COMBINATIONS,
        help="DNSKEY flags to use with --dnskey",
    )

    args = parser.parse_args(argv)
    return args


def _key_filenames(args: ArgsType, config: BindKeyConfig) -> list[Path]:
    res = [Path(this) for this in args.files]
    for name in args.keys:
        res += [config.get_key_filename(name)]
    return res


def keyinfo(
    logger: logging.Logger,
    args: ArgsType,
    config: BindKeyConfig | None = None,
) -> bool:
    """Load all requested key files and print information about them. Return True if all were OK."""
    if config is None:
        try:
            config = get_config(args.config)
        except (FileNotFoundError, yaml.YAMLError, ConfigurationError, ValidationError) as exc:
            logger.critical(f"Failed loading configuration: {exc}")
            return False

    policy = config.loader
    if args.verify_key_tag:
        policy = policy.model_copy(update={"verify_key_tag": True})

    try:
        filenames = _key_filenames(args, config)
    except ConfigurationError as exc:
        logger.critical(str(exc))
        return False
    if not filenames:
        logger.error("No key files to load")
        return False

    ok = True
    for filename in filenames:
        res = attempt_load_private_key(filename, policy=policy)
        if res.record is None:
            logger.error(f"Failed loading {filename} ({res.reached.name}): {res.error}")
            ok = False
            continue
        print(f"{filename}: {res.record}")
        if args.dnskey:
            try:
                _key = res.record.to_dnskey(args.flags)
            except ValueError as exc:
                logger.error(f"Can't make a DNSKEY of {filename}: {exc}")
                ok = False
                continue
            print(f"; key tag {_key.key_tag}")
            print(_key.to_text(res.record.signname))
    return ok


def main() -> None:
    """Main program function."""
    try:
        progname = os.path.basename(sys.argv[0])
        args = parse_args(_DEFAULTS)
        logger = get_logger(
            progname=progname, debug=args.debug, syslog=False, filelog=False
        ).getChild(__name__)
        res = keyinfo(logger, args)
        if res is True:
            sys.exit(0)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    main()

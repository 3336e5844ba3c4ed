# Copyright 2025 TIER IV, INC. All rights reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Calculate the checksum of an OTA package file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ota_package_guard.checksum import (
    ChecksumAlgorithm,
    canonical_checksum,
    generate_checksum,
)
from ota_package_guard_tools._utils import exit_with_err_msg

if TYPE_CHECKING:
    from argparse import ArgumentParser, Namespace, _SubParsersAction

logger = logging.getLogger(__name__)


def checksum_cmd_args(
    sub_arg_parser: _SubParsersAction[ArgumentParser], *parent_parser: ArgumentParser
) -> None:
    checksum_arg_parser = sub_arg_parser.add_parser(
        name="checksum",
        help=(_help_txt := "Calculate the checksum of an OTA package file"),
        description=_help_txt,
        parents=parent_parser,
    )
    checksum_arg_parser.add_argument(
        "--algorithm",
        choices=[_alg.value for _alg in ChecksumAlgorithm],
        default=ChecksumAlgorithm.SHA256.value,
        help="Checksum algorithm to use.",
    )
    checksum_arg_parser.add_argument(
        "--expected",
        help="If specified, verify the calculated checksum against this one.",
    )
    checksum_arg_parser.add_argument(
        "package_file",
        help="The OTA package file to calculate checksum for.",
    )
    checksum_arg_parser.set_defaults(handler=checksum_cmd)


def checksum_cmd(args: Namespace) -> None:
    logger.debug(f"calling {checksum_cmd.__name__} with {args}")
    package_file = Path(args.package_file)
    if not package_file.is_file():
        exit_with_err_msg(f"{package_file} is not a file!")

    algorithm = ChecksumAlgorithm(args.algorithm)
    with open(package_file, "rb") as _f:
        _checksum = generate_checksum(algorithm, _f)

    if args.expected and canonical_checksum(args.expected) != _checksum:
        exit_with_err_msg(
            f"checksum mismatch for {package_file}: "
            f"expected {args.expected}, calculated {_checksum}"
        )
    print(f"{algorithm.value}:{_checksum}")

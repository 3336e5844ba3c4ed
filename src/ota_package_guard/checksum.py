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
"""Checksum algorithms and the default checksum calculator."""

from __future__ import annotations

import hashlib
import logging
import zlib
from enum import Enum
from typing import IO, Any, Callable

from typing_extensions import Protocol

from ota_package_guard.common.io import DEFAULT_READ_CHUNK_SIZE, cal_stream_digest

logger = logging.getLogger(__name__)


class ChecksumAlgorithm(str, Enum):
    MD5 = "MD5"
    SHA256 = "SHA256"
    SHA384 = "SHA384"
    SHA512 = "SHA512"
    CRC32 = "CRC32"


class Crc32Hash:
    """hashlib-alike wrapper over zlib.crc32.

    The hexdigest is the big-endian unsigned CRC32 value in 8 hex chars.
    """

    name = "crc32"
    digest_size = 4

    def __init__(self, data: bytes = b"") -> None:
        self._crc = zlib.crc32(data)

    def update(self, data: Any) -> None:
        self._crc = zlib.crc32(data, self._crc)

    def digest(self) -> bytes:
        return self._crc.to_bytes(self.digest_size, byteorder="big")

    def hexdigest(self) -> str:
        return f"{self._crc:08x}"


DIGEST_IMPLS: dict[ChecksumAlgorithm, Callable[[], Any]] = {
    ChecksumAlgorithm.MD5: hashlib.md5,
    ChecksumAlgorithm.SHA256: hashlib.sha256,
    ChecksumAlgorithm.SHA384: hashlib.sha384,
    ChecksumAlgorithm.SHA512: hashlib.sha512,
    ChecksumAlgorithm.CRC32: Crc32Hash,
}


def canonical_checksum(checksum: str) -> str:
    """All supported algorithms have hex encoded checksum, compare in lower case."""
    return checksum.strip().lower()


def generate_checksum(
    algorithm: ChecksumAlgorithm,
    stream: IO[bytes],
    *,
    read_size: int = DEFAULT_READ_CHUNK_SIZE,
) -> str:
    """Calculate the checksum of <stream> with <algorithm>.

    Raises:
        OSError if the stream cannot be read.
    """
    try:
        _digest_impl = DIGEST_IMPLS[ChecksumAlgorithm(algorithm)]
    except (KeyError, ValueError) as e:
        raise ValueError(f"unsupported checksum algorithm: {algorithm}") from e
    return cal_stream_digest(stream, _digest_impl, chunk_size=read_size).hexdigest()


class ChecksumCalculatorProtocol(Protocol):
    def compute_checksum(
        self, algorithm: ChecksumAlgorithm, stream: IO[bytes]
    ) -> str: ...


class ChecksumCalculator:
    """The default checksum calculator, backed by hashlib and zlib."""

    def __init__(self, *, read_size: int = DEFAULT_READ_CHUNK_SIZE) -> None:
        self._read_size = read_size

    def compute_checksum(self, algorithm: ChecksumAlgorithm, stream: IO[bytes]) -> str:
        _checksum = generate_checksum(algorithm, stream, read_size=self._read_size)
        logger.debug(
            f"calculated {ChecksumAlgorithm(algorithm).value} checksum: {_checksum}"
        )
        return _checksum

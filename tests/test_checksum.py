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
"""Test checksum algorithms and the default checksum calculator."""

from __future__ import annotations

import hashlib
import io
import zlib

import pytest

from ota_package_guard.checksum import (
    ChecksumAlgorithm,
    ChecksumCalculator,
    Crc32Hash,
    canonical_checksum,
    generate_checksum,
)

TEST_CONTENT = b"Hello, OTA package!" * 1024


class _ReadOnlyStream:
    """A stream that only implements `read`."""

    def __init__(self, data: bytes) -> None:
        self._buf = io.BytesIO(data)

    def read(self, size: int = -1) -> bytes:
        return self._buf.read(size)


class TestGenerateChecksum:
    @pytest.mark.parametrize(
        "algorithm, expected",
        (
            (ChecksumAlgorithm.MD5, hashlib.md5(TEST_CONTENT).hexdigest()),
            (ChecksumAlgorithm.SHA256, hashlib.sha256(TEST_CONTENT).hexdigest()),
            (ChecksumAlgorithm.SHA384, hashlib.sha384(TEST_CONTENT).hexdigest()),
            (ChecksumAlgorithm.SHA512, hashlib.sha512(TEST_CONTENT).hexdigest()),
            (ChecksumAlgorithm.CRC32, f"{zlib.crc32(TEST_CONTENT):08x}"),
        ),
    )
    def test_generate_checksum(self, algorithm: ChecksumAlgorithm, expected: str):
        """Test checksum calculation for all supported algorithms."""
        assert generate_checksum(algorithm, io.BytesIO(TEST_CONTENT)) == expected

    def test_generate_checksum_small_read_size(self):
        """Test reading the stream in many small chunks."""
        result = generate_checksum(
            ChecksumAlgorithm.SHA256, io.BytesIO(TEST_CONTENT), read_size=7
        )
        assert result == hashlib.sha256(TEST_CONTENT).hexdigest()

    def test_generate_checksum_read_only_stream(self):
        """Test stream without readinto support."""
        result = generate_checksum(
            ChecksumAlgorithm.SHA256, _ReadOnlyStream(TEST_CONTENT), read_size=100
        )
        assert result == hashlib.sha256(TEST_CONTENT).hexdigest()

    def test_generate_checksum_from_file(self, tmp_path):
        """Test checksum calculation on a real file."""
        test_file = tmp_path / "fw.bin"
        test_file.write_bytes(TEST_CONTENT)

        with open(test_file, "rb") as f:
            result = generate_checksum(ChecksumAlgorithm.MD5, f)
        assert result == hashlib.md5(TEST_CONTENT).hexdigest()

    def test_generate_checksum_accepts_algorithm_name(self):
        """Test that algorithm can be specified by its value."""
        result = generate_checksum("SHA512", io.BytesIO(b""))  # type: ignore[arg-type]
        assert result == hashlib.sha512(b"").hexdigest()

    def test_unsupported_algorithm(self):
        """Test unsupported algorithm is rejected."""
        with pytest.raises(ValueError):
            generate_checksum("MURMUR3_32", io.BytesIO(b""))  # type: ignore[arg-type]


class TestCrc32Hash:
    def test_incremental_update(self):
        """Test CRC32 calculated by chunks equals to the one-shot result."""
        _hash = Crc32Hash()
        for i in range(0, len(TEST_CONTENT), 100):
            _hash.update(TEST_CONTENT[i : i + 100])
        assert _hash.hexdigest() == f"{zlib.crc32(TEST_CONTENT):08x}"

    def test_digest_bytes(self):
        """Test the digest is big-endian 4 bytes."""
        _hash = Crc32Hash(b"abc")
        assert _hash.digest() == zlib.crc32(b"abc").to_bytes(4, "big")
        assert _hash.digest().hex() == _hash.hexdigest()

    def test_zero_padding(self):
        """Test hexdigest is always 8 chars."""
        assert len(Crc32Hash(b"").hexdigest()) == 8


class TestCanonicalChecksum:
    def test_case_insensitive(self):
        """Test hex checksum is compared in lower case."""
        assert canonical_checksum("ABCDEF01") == canonical_checksum("abcdef01")

    def test_strip_whitespace(self):
        assert canonical_checksum(" abc\n") == "abc"


class TestChecksumCalculator:
    def test_compute_checksum(self):
        """Test the default checksum calculator."""
        calculator = ChecksumCalculator(read_size=64)
        result = calculator.compute_checksum(
            ChecksumAlgorithm.SHA256, io.BytesIO(TEST_CONTENT)
        )
        assert result == hashlib.sha256(TEST_CONTENT).hexdigest()

    def test_compute_checksum_on_closed_stream(self, tmp_path):
        """Test that error from the stream is propagated."""
        test_file = tmp_path / "fw.bin"
        test_file.write_bytes(TEST_CONTENT)

        f = open(test_file, "rb")
        f.close()
        with pytest.raises(ValueError):
            # reading from a closed file
            ChecksumCalculator().compute_checksum(ChecksumAlgorithm.SHA256, f)

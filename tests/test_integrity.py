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
"""Test structural completeness and content integrity checks."""

from __future__ import annotations

import hashlib
import zlib
from pathlib import Path

import pytest

from ota_package_guard.checksum import ChecksumAlgorithm
from ota_package_guard.errors import (
    ChecksumMismatch,
    ConflictingDelivery,
    IntegrityCheckUnavailable,
    InvalidField,
    MissingField,
    OperationalError,
)
from ota_package_guard.schema import PackageData
from ota_package_guard.validator.integrity import IntegrityChecker
from tests.conftest import (
    TEST_PAYLOAD,
    BrokenChecksumCalculator,
    make_inline_package,
    make_url_package,
)


@pytest.fixture
def checker() -> IntegrityChecker:
    return IntegrityChecker()


class TestDelivery:
    def test_url_package(self, checker: IntegrityChecker):
        """Test no metadata requirement applies to URL package."""
        checker.check_integrity(make_url_package())

    def test_url_with_data(self, checker: IntegrityChecker):
        """Test URL package with inline data is rejected."""
        pkg = make_url_package(url="http://x", data=b"\x00")
        with pytest.raises(ConflictingDelivery):
            checker.check_integrity(pkg)

    def test_url_with_data_regardless_other_fields(self, checker: IntegrityChecker):
        """Test conflicting delivery is reported before other field checks."""
        pkg = make_inline_package(url="http://x", file_name="", checksum="wrong")
        with pytest.raises(ConflictingDelivery):
            checker.check_integrity(pkg)


class TestRequiredFields:
    def test_missing_file_name(self, checker: IntegrityChecker):
        pkg = make_inline_package(
            file_name="",
            content_type="fw/bin",
            checksum_algorithm=ChecksumAlgorithm.SHA256,
            checksum="abc",
        )
        with pytest.raises(MissingField) as exc_info:
            checker.check_integrity(pkg)
        assert exc_info.value.field_name == "fileName"

    @pytest.mark.parametrize(
        "overrides, expected_field",
        (
            ({"file_name": None}, "fileName"),
            ({"content_type": ""}, "contentType"),
            ({"checksum_algorithm": None}, "checksumAlgorithm"),
            ({"checksum": ""}, "checksum"),
            ({"data": None}, "data"),
            # the first missing field is reported
            ({"content_type": None, "checksum": None}, "contentType"),
            ({"file_name": "", "data": None}, "fileName"),
        ),
    )
    def test_missing_field(
        self, checker: IntegrityChecker, overrides: dict, expected_field: str
    ):
        pkg = make_inline_package(**overrides)
        with pytest.raises(MissingField) as exc_info:
            checker.check_integrity(pkg)
        assert exc_info.value.field_name == expected_field


class TestChecksum:
    def test_valid_package(self, checker: IntegrityChecker):
        checker.check_integrity(make_inline_package())

    def test_tampered_data(self, checker: IntegrityChecker):
        """Test tampering one byte of the data causes mismatch."""
        tampered = bytearray(TEST_PAYLOAD)
        tampered[len(tampered) // 2] ^= 0xFF
        pkg = make_inline_package(
            data=PackageData(bytes(tampered)),
            checksum=hashlib.sha256(TEST_PAYLOAD).hexdigest(),
        )

        with pytest.raises(ChecksumMismatch) as exc_info:
            checker.check_integrity(pkg)
        assert exc_info.value.expected == hashlib.sha256(TEST_PAYLOAD).hexdigest()
        assert exc_info.value.calculated == hashlib.sha256(tampered).hexdigest()

    def test_checksum_upper_case(self, checker: IntegrityChecker):
        """Test hex checksum is compared in canonical form."""
        pkg = make_inline_package(
            checksum=hashlib.sha256(TEST_PAYLOAD).hexdigest().upper()
        )
        checker.check_integrity(pkg)

    @pytest.mark.parametrize(
        "algorithm, checksum",
        (
            (ChecksumAlgorithm.MD5, hashlib.md5(TEST_PAYLOAD).hexdigest()),
            (ChecksumAlgorithm.SHA384, hashlib.sha384(TEST_PAYLOAD).hexdigest()),
            (ChecksumAlgorithm.SHA512, hashlib.sha512(TEST_PAYLOAD).hexdigest()),
            (ChecksumAlgorithm.CRC32, f"{zlib.crc32(TEST_PAYLOAD):08x}"),
        ),
    )
    def test_algorithms(
        self, checker: IntegrityChecker, algorithm: ChecksumAlgorithm, checksum: str
    ):
        pkg = make_inline_package(checksum_algorithm=algorithm, checksum=checksum)
        checker.check_integrity(pkg)

    def test_algorithm_mismatch(self, checker: IntegrityChecker):
        """Test sha256 checksum declared as md5 is rejected."""
        pkg = make_inline_package(checksum_algorithm=ChecksumAlgorithm.MD5)
        with pytest.raises(ChecksumMismatch):
            checker.check_integrity(pkg)

    def test_file_backed_data(self, checker: IntegrityChecker, tmp_path: Path):
        blob = tmp_path / "fw.bin"
        blob.write_bytes(TEST_PAYLOAD)
        checker.check_integrity(make_inline_package(data=PackageData(blob)))

    def test_calculator_invoked_with_algorithm(self, mocker):
        """Test the checksum collaborator is invoked with declared algorithm."""
        calculator = mocker.MagicMock()
        calculator.compute_checksum.return_value = "abc"
        pkg = make_inline_package(
            checksum_algorithm=ChecksumAlgorithm.SHA512, checksum="abc"
        )

        IntegrityChecker(calculator).check_integrity(pkg)
        calculator.compute_checksum.assert_called_once()
        assert calculator.compute_checksum.call_args[0][0] == ChecksumAlgorithm.SHA512


class TestDataSize:
    def test_declared_size_mismatch(self, checker: IntegrityChecker):
        """Test the declared size must be the size of the data."""
        pkg = make_inline_package(data_size=len(TEST_PAYLOAD) - 1)

        with pytest.raises(InvalidField) as exc_info:
            checker.check_integrity(pkg)
        assert exc_info.value.field_name == "dataSize"

    def test_declared_size_zero(self, checker: IntegrityChecker):
        with pytest.raises(InvalidField):
            checker.check_integrity(make_inline_package(b"x" * 2000, data_size=0))

    def test_size_not_declared(self, checker: IntegrityChecker):
        checker.check_integrity(make_inline_package(data_size=None))

    def test_file_backed_size_mismatch(self, checker: IntegrityChecker, tmp_path: Path):
        blob = tmp_path / "fw.bin"
        blob.write_bytes(TEST_PAYLOAD + b"\x00")

        with pytest.raises(InvalidField):
            checker.check_integrity(make_inline_package(data=PackageData(blob)))

    def test_url_package_size_not_checked(self, checker: IntegrityChecker):
        """Test the declared size of URL package is taken as is."""
        checker.check_data_size(make_url_package(data_size=123))
        checker.check_integrity(make_url_package(data_size=123))

    def test_required_fields_guarded_without_field_check(
        self, checker: IntegrityChecker, mocker
    ):
        """Test missing data is still reported if the field check is skipped."""
        mocker.patch.object(checker, "check_required_fields")
        with pytest.raises(MissingField) as exc_info:
            checker.check_integrity(make_inline_package(data=None))
        assert exc_info.value.field_name == "data"


class TestIntegrityCheckUnavailable:
    def test_unreadable_blob(self, checker: IntegrityChecker, tmp_path: Path):
        """Test missing blob file is an operational error, not a mismatch."""
        pkg = make_inline_package(data=PackageData(tmp_path / "gone"))

        with pytest.raises(IntegrityCheckUnavailable) as exc_info:
            checker.check_integrity(pkg)
        assert isinstance(exc_info.value, OperationalError)
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    def test_calculator_io_error(self):
        pkg = make_inline_package()
        with pytest.raises(IntegrityCheckUnavailable):
            IntegrityChecker(BrokenChecksumCalculator()).check_integrity(pkg)

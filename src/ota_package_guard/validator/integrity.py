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
"""Structural completeness and content integrity checks of OTA packages."""

from __future__ import annotations

import logging

from ota_package_guard.checksum import (
    ChecksumCalculator,
    ChecksumCalculatorProtocol,
    canonical_checksum,
)
from ota_package_guard.errors import (
    ChecksumMismatch,
    ConflictingDelivery,
    IntegrityCheckUnavailable,
    InvalidField,
    MissingField,
)
from ota_package_guard.schema import OtaPackage, field_alias

logger = logging.getLogger(__name__)

# NOTE: the order matters, the first missing one is reported.
INLINE_DATA_REQUIRED_FIELDS = (
    "file_name",
    "content_type",
    "checksum_algorithm",
    "checksum",
    "data",
)


class IntegrityChecker:
    def __init__(self, calculator: ChecksumCalculatorProtocol | None = None) -> None:
        self._calculator = calculator or ChecksumCalculator()

    def check_delivery(self, pkg: OtaPackage) -> bool:
        """Return True if <pkg> is delivered by URL, False for inline data.

        Raises:
            ConflictingDelivery if <pkg> has URL and inline data at the same time.
        """
        if pkg.has_url:
            if pkg.has_data:
                raise ConflictingDelivery()
            return True
        return False


    def check_required_fields(self, pkg: OtaPackage) -> None:
        for _field_name in INLINE_DATA_REQUIRED_FIELDS:
            _value = getattr(pkg, _field_name)
            if _value is None or (isinstance(_value, str) and not _value):
                raise MissingField(field_alias(_field_name))

    def _unavailable(self, pkg: OtaPackage, e: OSError) -> IntegrityCheckUnavailable:
        logger.error(f"failed to check OtaPackage data {pkg.id}: {e!r}", exc_info=e)
        return IntegrityCheckUnavailable(
            f"OtaPackage {pkg.id} file can't be validated: {e!r}"
        )

    def check_data_size(self, pkg: OtaPackage) -> None:
        """Check the declared `data_size` against the actual size of the inline data.

        Raises:
            InvalidField if <pkg> declares a size different from its data.
            IntegrityCheckUnavailable if the size of the data cannot be read.
        """
        if pkg.data is None or pkg.data_size is None:
            return
        try:
            _actual_size = pkg.data.size
        except OSError as e:
            raise self._unavailable(pkg, e) from e

        if pkg.data_size != _actual_size:
            raise InvalidField(
                field_alias("data_size"),
                f"declared {pkg.data_size} bytes, but the data is {_actual_size} bytes",
            )

    def check_integrity(self, pkg: OtaPackage) -> None:
        """Check that <pkg> is complete, and its data matches the declared checksum.

        No requirement applies to package delivered by URL.

        Raises:
            ConflictingDelivery, MissingField, InvalidField, ChecksumMismatch for invalid <pkg>.
            IntegrityCheckUnavailable if the data cannot be read for calculating checksum.
        """
        if self.check_delivery(pkg):
            return
        self.check_required_fields(pkg)

        _data, _algorithm, _checksum = pkg.data, pkg.checksum_algorithm, pkg.checksum
        if _data is None:
            raise MissingField(field_alias("data"))
        if _algorithm is None:
            raise MissingField(field_alias("checksum_algorithm"))
        if not _checksum:
            raise MissingField(field_alias("checksum"))
        self.check_data_size(pkg)

        try:
            with _data.open() as _stream:
                _calculated = self._calculator.compute_checksum(_algorithm, _stream)
        except OSError as e:
            raise self._unavailable(pkg, e) from e

        if canonical_checksum(_calculated) != canonical_checksum(_checksum):
            raise ChecksumMismatch(_checksum, _calculated)

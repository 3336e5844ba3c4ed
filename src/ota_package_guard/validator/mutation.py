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
"""Update-time invariants of OTA packages."""

from __future__ import annotations

import logging
from typing import NamedTuple

from ota_package_guard.errors import ImmutableDataViolation, ImmutableFieldViolation
from ota_package_guard.schema import OtaPackage, field_alias

logger = logging.getLogger(__name__)

IMMUTABLE_FIELDS = ("tenant_id", "type", "title", "version", "device_profile_id")
# once the data is stored, the fields describing it are frozen together with it
IMMUTABLE_DATA_FIELDS = (
    "file_name",
    "content_type",
    "checksum_algorithm",
    "checksum",
    "data_size",
)


class UpdateDecision(NamedTuple):
    quota_check_required: bool


class MutationGuard:
    def check_immutable_fields(self, old_pkg: OtaPackage, new_pkg: OtaPackage) -> None:
        """Fields that have been set cannot be changed by update.

        Raises:
            ImmutableFieldViolation with the first changed field.
        """
        _fields_to_check = IMMUTABLE_FIELDS
        if old_pkg.has_data:
            _fields_to_check += IMMUTABLE_DATA_FIELDS

        for _field_name in _fields_to_check:
            _old_value = getattr(old_pkg, _field_name)
            _new_value = getattr(new_pkg, _field_name)
            # an omitted data_size means the size of the resubmitted data
            if _field_name == "data_size" and _new_value is None:
                _new_value = new_pkg.effective_data_size
            if _old_value is not None and _old_value != _new_value:
                raise ImmutableFieldViolation(field_alias(_field_name))

    def check_update(self, old_pkg: OtaPackage, new_pkg: OtaPackage) -> UpdateDecision:
        """Check the data transition from <old_pkg> to <new_pkg>.

        Once data is attached to a package, it cannot be replaced or removed.
        Attaching data to a package without data is allowed, and in such case
            the caller MUST check the quota with the new data size.

        Raises:
            ImmutableDataViolation if <old_pkg> has data and <new_pkg>'s data differs.
        """
        if old_pkg.data is not None:
            if old_pkg.data != new_pkg.data:
                raise ImmutableDataViolation()
            return UpdateDecision(quota_check_required=False)

        if new_pkg.data is not None:
            logger.debug(f"data is attached to OtaPackage {new_pkg.id}")
            return UpdateDecision(quota_check_required=True)
        return UpdateDecision(quota_check_required=False)

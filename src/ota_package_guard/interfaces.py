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
"""Interfaces of the collaborators the validators depend on."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from typing_extensions import Protocol

from ota_package_guard.checksum import ChecksumCalculatorProtocol
from ota_package_guard.schema import OtaPackage, TenantProfileConfiguration

__all__ = [
    "ChecksumCalculatorProtocol",
    "OtaPackageDaoProtocol",
    "SumDataSizeDaoProtocol",
    "TenantProfileCacheProtocol",
]


class TenantProfileCacheProtocol(Protocol):
    def get_profile(self, tenant_id: UUID) -> TenantProfileConfiguration: ...


class SumDataSizeDaoProtocol(Protocol):
    def sum_data_size_by_tenant(
        self, tenant_id: UUID, exclude_id: Optional[UUID] = None
    ) -> int:
        """Return the total data size of entities owned by <tenant_id>.

        If <exclude_id> is specified, the entity with this id MUST NOT be counted.
        """
        ...


class OtaPackageDaoProtocol(SumDataSizeDaoProtocol, Protocol):
    def find_by_id(self, tenant_id: UUID, package_id: UUID) -> Optional[OtaPackage]: ...

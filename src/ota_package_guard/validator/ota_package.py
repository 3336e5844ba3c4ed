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
"""Validator for OTA package records, run before creating or updating them."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from ota_package_guard.checksum import ChecksumCalculator, ChecksumCalculatorProtocol
from ota_package_guard.config import ValidatorConfig
from ota_package_guard.errors import InvalidField, MissingField
from ota_package_guard.interfaces import OtaPackageDaoProtocol, TenantProfileCacheProtocol
from ota_package_guard.schema import EntityType, OtaPackage, field_alias

from .base import DataValidator
from .integrity import IntegrityChecker
from .mutation import MutationGuard
from .quota import QuotaGuard


class OtaPackageDataValidator(DataValidator[OtaPackage]):
    """Validate an OTA package before it is persisted.

    On creation: info checks, then integrity checks, then the tenant quota.
    On update: load the existing package, info checks and immutability checks, then
        the tenant quota only if data is newly attached to the package.

    The validator holds no mutable state, all the collaborators are injected.
    """

    entity_type = EntityType.OTA_PACKAGE

    def __init__(
        self,
        dao: OtaPackageDaoProtocol,
        profile_cache: TenantProfileCacheProtocol,
        checksum_calculator: ChecksumCalculatorProtocol | None = None,
        *,
        config: ValidatorConfig | None = None,
    ) -> None:
        self._config = config = config or ValidatorConfig()
        self._dao = dao

        if checksum_calculator is None:
            checksum_calculator = ChecksumCalculator(
                read_size=config.checksum_read_size
            )
        self.integrity_checker = IntegrityChecker(checksum_calculator)
        self.quota_guard = QuotaGuard(profile_cache, dao, entity_type=self.entity_type)
        self.mutation_guard = MutationGuard()

    @property
    def config(self) -> ValidatorConfig:
        return self._config

    def validate_info(self, tenant_id: UUID, pkg: OtaPackage) -> None:
        for _field_name in ("title", "version"):
            _value: Optional[str] = getattr(pkg, _field_name)
            if not _value:
                raise MissingField(field_alias(_field_name))
            if len(_value) > self._config.max_field_length:
                raise InvalidField(
                    field_alias(_field_name),
                    f"should be equal or shorter than {self._config.max_field_length} characters",
                )

        if pkg.type is None:
            raise MissingField(field_alias("type"))

        if pkg.tenant_id is None:
            raise MissingField(field_alias("tenant_id"))
        if pkg.tenant_id != tenant_id:
            raise InvalidField(
                field_alias("tenant_id"), f"should be assigned to tenant {tenant_id}"
            )

    def find_existing(self, tenant_id: UUID, entity_id: UUID) -> Optional[OtaPackage]:
        return self._dao.find_by_id(tenant_id, entity_id)

    def validate_data_impl(self, tenant_id: UUID, data: OtaPackage) -> None:
        self.validate_info(tenant_id, data)
        self.integrity_checker.check_integrity(data)

    def validate_create_impl(self, tenant_id: UUID, data: OtaPackage) -> None:
        self.quota_guard.check_quota(tenant_id, data.effective_data_size)

    def validate_update_impl(
        self, tenant_id: UUID, data: OtaPackage, old: OtaPackage
    ) -> None:
        self.validate_info(tenant_id, data)
        if self._config.verify_integrity_on_update and data.has_data:
            self.integrity_checker.check_integrity(data)
        else:
            self.integrity_checker.check_delivery(data)
            self.integrity_checker.check_data_size(data)

        _decision = self.mutation_guard.check_update(old, data)
        self.mutation_guard.check_immutable_fields(old, data)
        if _decision.quota_check_required:
            self.quota_guard.check_quota(
                tenant_id, data.effective_data_size, exclude_id=data.id
            )

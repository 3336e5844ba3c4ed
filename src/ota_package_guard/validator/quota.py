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
"""Per-tenant storage quota enforcement."""

from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from ota_package_guard.errors import QuotaExceeded
from ota_package_guard.interfaces import (
    SumDataSizeDaoProtocol,
    TenantProfileCacheProtocol,
)
from ota_package_guard.schema import EntityType, TenantProfileConfiguration

logger = logging.getLogger(__name__)

UNLIMITED = 0

QUOTA_LIMIT_FIELDS = {
    EntityType.OTA_PACKAGE: "max_ota_packages_in_bytes",
    EntityType.TB_RESOURCE: "max_resources_in_bytes",
}


class QuotaGuard:
    """Enforce the maximum total data size of one kind of entity owned by a tenant.

    The ceiling is read from the tenant's profile configuration, `0` means unlimited.
    The check is read-then-decide, it doesn't reserve the quota. Concurrent
        creations for the same tenant might together exceed the ceiling, callers
        that care about this MUST serialize validating and saving per tenant.
    """

    def __init__(
        self,
        profile_cache: TenantProfileCacheProtocol,
        dao: SumDataSizeDaoProtocol,
        *,
        entity_type: EntityType = EntityType.OTA_PACKAGE,
    ) -> None:
        if entity_type not in QUOTA_LIMIT_FIELDS:
            raise ValueError(f"{entity_type} is not governed by quota")
        self._profile_cache = profile_cache
        self._dao = dao
        self.entity_type = entity_type
        self._limit_field = QUOTA_LIMIT_FIELDS[entity_type]

    def get_limit(self, profile: TenantProfileConfiguration) -> int:
        return getattr(profile, self._limit_field)

    def check_quota(
        self,
        tenant_id: UUID,
        proposed_size: int,
        *,
        exclude_id: Optional[UUID] = None,
    ) -> None:
        """Check whether <tenant_id> can store another <proposed_size> bytes.

        Args:
            tenant_id: The owner of the entity.
            proposed_size: The data size of the new or updated entity.
            exclude_id: For update, the id of the entity being updated, its previous
                size will not be counted as already consumed.

        Raises:
            QuotaExceeded if the existing total plus <proposed_size> is larger
                than the ceiling. Collaborators' errors are propagated as is.
        """
        if proposed_size == 0:
            return

        _limit = self.get_limit(self._profile_cache.get_profile(tenant_id))
        if _limit == UNLIMITED:
            logger.debug(f"{self.entity_type.value} quota is unlimited for {tenant_id=}")
            return

        _current = self._dao.sum_data_size_by_tenant(tenant_id, exclude_id)
        logger.debug(
            f"{self.entity_type.value} quota for {tenant_id=}: "
            f"{_current=}, {proposed_size=}, {_limit=}"
        )
        if _current + proposed_size > _limit:
            raise QuotaExceeded(
                self.entity_type.value,
                tenant_id=tenant_id,
                limit=_limit,
                current_usage=_current,
                requested_size=proposed_size,
            )

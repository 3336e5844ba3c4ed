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
"""Common control flow for validating an entity before it is saved."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import ClassVar, Generic, Optional, TypeVar
from uuid import UUID

from ota_package_guard.errors import EntityNotFound
from ota_package_guard.schema import EntityType

logger = logging.getLogger(__name__)

D = TypeVar("D")


class DataValidator(ABC, Generic[D]):
    """Base class of the per entity kind validators.

    NOTE: this class MUST not be directly used, it needs to be
          subclassed and assigned `entity_type`.

    The subclass implements the following hooks:
        1. `validate_data_impl`: validation on the entity itself, runs on creation.
        2. `validate_create_impl`: extra checks only for creation, like quota.
        3. `validate_update_impl`: checks against the existing entity on update.
    """

    entity_type: ClassVar[EntityType]

    @staticmethod
    def entity_id(data: D) -> Optional[UUID]:
        return getattr(data, "id", None)

    def validate(self, tenant_id: UUID, data: D) -> None:
        """Validate <data> before saving, dispatch by whether it is a new entity."""
        if self.entity_id(data) is None:
            return self.validate_create(tenant_id, data)
        return self.validate_update(tenant_id, data)

    def validate_create(self, tenant_id: UUID, data: D) -> None:
        logger.debug(f"validate creating {self.entity_type.value} for {tenant_id=}")
        self.validate_data_impl(tenant_id, data)
        self.validate_create_impl(tenant_id, data)

    def validate_update(self, tenant_id: UUID, data: D) -> None:
        _entity_id = self.entity_id(data)
        logger.debug(
            f"validate updating {self.entity_type.value} {_entity_id} for {tenant_id=}"
        )
        if _entity_id is None or (old := self.find_existing(tenant_id, _entity_id)) is None:
            raise EntityNotFound(self.entity_type.value, _entity_id)
        self.validate_update_impl(tenant_id, data, old)

    @abstractmethod
    def find_existing(self, tenant_id: UUID, entity_id: UUID) -> Optional[D]:
        raise NotImplementedError

    @abstractmethod
    def validate_data_impl(self, tenant_id: UUID, data: D) -> None:
        raise NotImplementedError

    @abstractmethod
    def validate_create_impl(self, tenant_id: UUID, data: D) -> None:
        raise NotImplementedError

    @abstractmethod
    def validate_update_impl(self, tenant_id: UUID, data: D, old: D) -> None:
        raise NotImplementedError

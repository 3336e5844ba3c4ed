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
"""A process-wide cache of tenant profile configurations.

The profiles can be loaded from a YAML file in the following format:

    default:
      maxOtaPackagesInBytes: 0
    tenants:
      <tenant uuid>:
        maxOtaPackagesInBytes: 1048576
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Dict, Optional, Union
from uuid import UUID

import yaml
from pydantic import BaseModel
from typing_extensions import Self

from ota_package_guard.errors import TenantProfileUnavailable
from ota_package_guard.schema import TenantProfileConfiguration

logger = logging.getLogger(__name__)


class TenantProfilesFile(BaseModel):
    default: Optional[TenantProfileConfiguration] = None
    tenants: Dict[UUID, TenantProfileConfiguration] = {}


class TenantProfileCache:
    """Thread-safe in-memory tenant profile cache.

    Tenants without their own profile fall back to the default profile if it is set.
    """

    def __init__(
        self,
        profiles: Optional[Dict[UUID, TenantProfileConfiguration]] = None,
        *,
        default: Optional[TenantProfileConfiguration] = None,
    ) -> None:
        self._lock = threading.Lock()
        self._profiles: Dict[UUID, TenantProfileConfiguration] = dict(profiles or {})
        self._default = default

    @classmethod
    def load_yaml(cls, fpath: Union[str, Path]) -> Self:
        _raw = yaml.safe_load(Path(fpath).read_text()) or {}
        _parsed = TenantProfilesFile.model_validate(_raw)
        logger.debug(f"load {len(_parsed.tenants)} tenant profiles from {fpath}")
        return cls(_parsed.tenants, default=_parsed.default)

    def get_profile(self, tenant_id: UUID) -> TenantProfileConfiguration:
        """
        Raises:
            TenantProfileUnavailable if neither <tenant_id>'s profile nor the default one is set.
        """
        with self._lock:
            _profile = self._profiles.get(tenant_id, self._default)
        if _profile is None:
            raise TenantProfileUnavailable(f"no profile for tenant {tenant_id}")
        return _profile

    def put(self, tenant_id: UUID, profile: TenantProfileConfiguration) -> None:
        with self._lock:
            self._profiles[tenant_id] = profile

    def evict(self, tenant_id: UUID) -> None:
        with self._lock:
            self._profiles.pop(tenant_id, None)

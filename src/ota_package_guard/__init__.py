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
"""Validate OTA packages before they are saved in a multi-tenant system."""

from ._version import version
from .checksum import ChecksumAlgorithm, ChecksumCalculator
from .config import ValidatorConfig
from .errors import DataValidationError, OperationalError, OtaPackageGuardError
from .profile_cache import TenantProfileCache
from .schema import OtaPackage, OtaPackageType, PackageData, TenantProfileConfiguration
from .validator import OtaPackageDataValidator

__all__ = [
    "ChecksumAlgorithm",
    "ChecksumCalculator",
    "DataValidationError",
    "OperationalError",
    "OtaPackage",
    "OtaPackageDataValidator",
    "OtaPackageGuardError",
    "OtaPackageType",
    "PackageData",
    "TenantProfileCache",
    "TenantProfileConfiguration",
    "ValidatorConfig",
    "version",
]

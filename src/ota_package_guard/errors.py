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
"""Errors raised when validating OTA packages.

Two families are defined:
    1. DataValidationError: the input is rejected and the caller can fix it,
        each carries a `reason` from `ValidationReason`.
    2. OperationalError: the validation cannot be done due to infrastructure
        failure, the current operation should be treated as failed and be
        retried or alerted upon by the caller.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ValidationReason(str, Enum):
    MISSING_FIELD = "missing_field"
    INVALID_FIELD = "invalid_field"
    CONFLICTING_DELIVERY = "conflicting_delivery"
    CHECKSUM_MISMATCH = "checksum_mismatch"
    QUOTA_EXCEEDED = "quota_exceeded"
    IMMUTABLE_DATA = "immutable_data"
    IMMUTABLE_FIELD = "immutable_field"
    NOT_FOUND = "not_found"


class OtaPackageGuardError(Exception): ...


#
# ------ validation errors ------ #
#


class DataValidationError(OtaPackageGuardError):
    reason: ValidationReason


class MissingField(DataValidationError):
    reason = ValidationReason.MISSING_FIELD

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f"OtaPackage {field_name} should be specified!")


class InvalidField(DataValidationError):
    reason = ValidationReason.INVALID_FIELD

    def __init__(self, field_name: str, msg: str) -> None:
        self.field_name = field_name
        super().__init__(f"OtaPackage {field_name} is invalid: {msg}")


class ConflictingDelivery(DataValidationError):
    reason = ValidationReason.CONFLICTING_DELIVERY

    def __init__(self) -> None:
        super().__init__("File can't be saved if URL present!")


class ChecksumMismatch(DataValidationError):
    reason = ValidationReason.CHECKSUM_MISMATCH

    def __init__(self, expected: str, calculated: str) -> None:
        self.expected = expected
        self.calculated = calculated
        super().__init__(
            f"Wrong OtaPackage file: checksum mismatch, {expected=}, {calculated=}"
        )


class QuotaExceeded(DataValidationError):
    reason = ValidationReason.QUOTA_EXCEEDED

    def __init__(
        self,
        entity_type: str,
        *,
        tenant_id: Any,
        limit: int,
        current_usage: int,
        requested_size: int,
    ) -> None:
        self.entity_type = entity_type
        self.tenant_id = tenant_id
        self.limit = limit
        self.current_usage = current_usage
        self.requested_size = requested_size
        super().__init__(
            f"Failed to create the {entity_type}, files size limit is exhausted {limit} bytes!"
        )


class ImmutableDataViolation(DataValidationError):
    reason = ValidationReason.IMMUTABLE_DATA

    def __init__(self) -> None:
        super().__init__("Updating OtaPackage data is prohibited!")


class ImmutableFieldViolation(DataValidationError):
    reason = ValidationReason.IMMUTABLE_FIELD

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f"Updating OtaPackage {field_name} is prohibited!")


class EntityNotFound(DataValidationError):
    reason = ValidationReason.NOT_FOUND

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} {entity_id} is not found!")


#
# ------ operational errors ------ #
#


class OperationalError(OtaPackageGuardError): ...


class IntegrityCheckUnavailable(OperationalError): ...


class TenantProfileUnavailable(OperationalError): ...


class PackageStoreUnavailable(OperationalError): ...

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
"""Shared test fixtures for ota-package-guard tests."""

from __future__ import annotations

import hashlib
from typing import IO, Optional
from uuid import UUID, uuid4

import pytest

from ota_package_guard.checksum import ChecksumAlgorithm
from ota_package_guard.schema import (
    OtaPackage,
    OtaPackageType,
    PackageData,
    TenantProfileConfiguration,
)

TENANT_ID = UUID("5f2d1c9a-7a4e-4d4b-9a51-3c6f0f4f2a11")
OTHER_TENANT_ID = UUID("0b3e44d5-a6a1-4a52-8a1e-7d3c22d8b0e4")

TEST_PAYLOAD = b"firmware-image-content" * 32


class FakeProfileCache:
    def __init__(self, max_ota_packages_in_bytes: int = 0) -> None:
        self.profile = TenantProfileConfiguration(
            max_ota_packages_in_bytes=max_ota_packages_in_bytes
        )
        self.calls: list[UUID] = []

    def get_profile(self, tenant_id: UUID) -> TenantProfileConfiguration:
        self.calls.append(tenant_id)
        return self.profile


class FakeOtaPackageDao:
    """In-memory data-access collaborator."""

    def __init__(self, *packages: OtaPackage) -> None:
        self.packages = {pkg.id: pkg for pkg in packages}
        self.extra_usage = 0
        self.sum_calls: list[tuple[UUID, Optional[UUID]]] = []

    def find_by_id(self, tenant_id: UUID, package_id: UUID) -> Optional[OtaPackage]:
        pkg = self.packages.get(package_id)
        if pkg is None or pkg.tenant_id != tenant_id:
            return None
        return pkg

    def sum_data_size_by_tenant(
        self, tenant_id: UUID, exclude_id: Optional[UUID] = None
    ) -> int:
        self.sum_calls.append((tenant_id, exclude_id))
        return self.extra_usage + sum(
            pkg.effective_data_size
            for pkg in self.packages.values()
            if pkg.tenant_id == tenant_id and pkg.id != exclude_id
        )


class BrokenChecksumCalculator:
    def compute_checksum(self, algorithm: ChecksumAlgorithm, stream: IO[bytes]) -> str:
        raise OSError("stream is unreadable")


def make_inline_package(
    payload: bytes = TEST_PAYLOAD, *, with_id: bool = False, **kwargs
) -> OtaPackage:
    """Create a valid OTA package with inline data."""
    _fields = dict(
        id=uuid4() if with_id else None,
        tenant_id=TENANT_ID,
        type=OtaPackageType.FIRMWARE,
        title="fw",
        version="1.0.0",
        file_name="fw.bin",
        content_type="application/octet-stream",
        checksum_algorithm=ChecksumAlgorithm.SHA256,
        checksum=hashlib.sha256(payload).hexdigest(),
        data=PackageData(payload),
        data_size=len(payload),
    )
    _fields.update(kwargs)
    return OtaPackage(**_fields)


def make_url_package(*, with_id: bool = False, **kwargs) -> OtaPackage:
    _fields = dict(
        id=uuid4() if with_id else None,
        tenant_id=TENANT_ID,
        type=OtaPackageType.FIRMWARE,
        title="fw",
        version="1.0.0",
        url="https://example.com/fw.bin",
    )
    _fields.update(kwargs)
    return OtaPackage(**_fields)


@pytest.fixture
def profile_cache() -> FakeProfileCache:
    return FakeProfileCache()


@pytest.fixture
def dao() -> FakeOtaPackageDao:
    return FakeOtaPackageDao()

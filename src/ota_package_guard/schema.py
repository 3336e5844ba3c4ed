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
"""Models for OTA package records and tenant profile configuration."""

from __future__ import annotations

import io
from enum import Enum
from hashlib import sha256
from pathlib import Path
from typing import IO, Any, Optional, Union
from uuid import UUID

from pydantic import Field, GetCoreSchemaHandler, NonNegativeInt
from pydantic.alias_generators import to_camel
from pydantic_core import CoreSchema, core_schema
from typing_extensions import Self

from ota_package_guard.checksum import ChecksumAlgorithm
from ota_package_guard.common.io import cal_stream_digest
from ota_package_guard.common.model_spec import AliasEnabledModel


def field_alias(field_name: str) -> str:
    """The name of <field_name> when exchanged with external, like `fileName`."""
    return to_camel(field_name)


class EntityType(str, Enum):
    OTA_PACKAGE = "OTA_PACKAGE"
    TB_RESOURCE = "TB_RESOURCE"


class OtaPackageType(str, Enum):
    FIRMWARE = "FIRMWARE"
    SOFTWARE = "SOFTWARE"


class PackageData:
    """The inline binary payload of an OTA package.

    The payload is backed by either in-memory bytes, or a blob file on local storage.
    The blob file is opened lazily, so reading it might fail with OSError.
    """

    def __init__(self, _src: Union[bytes, bytearray, memoryview, Path]):
        if isinstance(_src, Path):
            self._contents: Optional[bytes] = None
            self._fpath: Optional[Path] = _src
        elif isinstance(_src, (bytes, bytearray, memoryview)):
            self._contents = bytes(_src)
            self._fpath = None
        else:
            raise TypeError(f"unexpected {type(_src)=}")

    @property
    def in_memory(self) -> bool:
        return self._contents is not None

    @property
    def fpath(self) -> Optional[Path]:
        return self._fpath

    @property
    def size(self) -> int:
        if self._contents is not None:
            return len(self._contents)
        assert self._fpath
        return self._fpath.stat().st_size

    def open(self) -> IO[bytes]:
        """Open the payload as a binary stream, caller should close it after use."""
        if self._contents is not None:
            return io.BytesIO(self._contents)
        assert self._fpath
        return open(self._fpath, "rb")

    def read_bytes(self) -> bytes:
        if self._contents is not None:
            return self._contents
        assert self._fpath
        return self._fpath.read_bytes()

    def _content_digest(self) -> bytes:
        with self.open() as _stream:
            return cal_stream_digest(_stream, sha256).digest()

    def __eq__(self, value: object) -> bool:
        if not isinstance(value, PackageData):
            return False
        if self._contents is not None and value._contents is not None:
            return self._contents == value._contents
        # two blob files are the same payload only when they are the same blob
        if self._fpath is not None and value._fpath is not None:
            return self._fpath == value._fpath
        return self._content_digest() == value._content_digest()

    def __repr__(self) -> str:
        if self._fpath is not None:
            return f"{self.__class__.__name__}(fpath={self._fpath})"
        return f"{self.__class__.__name__}(size={self.size})"

    @classmethod
    def _validator(cls, data: Any) -> Self:
        if isinstance(data, cls):
            return data
        if isinstance(data, (bytes, bytearray, memoryview, Path)):
            return cls(data)
        raise ValueError(f"invalid {type(data)=}")

    @classmethod
    def _from_fpath_validator(cls, data: str) -> Self:
        return cls(Path(data))

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> CoreSchema:
        # NOTE: from JSON/YAML input, the payload is referred by its file path.
        json_schema = core_schema.chain_schema(
            [
                core_schema.str_schema(min_length=1),
                core_schema.no_info_plain_validator_function(cls._from_fpath_validator),
            ]
        )
        return core_schema.json_or_python_schema(
            json_schema=json_schema,
            python_schema=core_schema.no_info_plain_validator_function(cls._validator),
        )


class OtaPackage(AliasEnabledModel):
    """An OTA package record.

    A package is delivered either by an external URL, or by inline binary data,
        never both.
    """

    id: Optional[UUID] = None
    tenant_id: Optional[UUID] = None
    device_profile_id: Optional[UUID] = None
    created_time: Optional[int] = None

    type: Optional[OtaPackageType] = None
    title: Optional[str] = None
    version: Optional[str] = None
    tag: Optional[str] = None
    url: Optional[str] = None

    file_name: Optional[str] = None
    content_type: Optional[str] = None
    checksum_algorithm: Optional[ChecksumAlgorithm] = None
    checksum: Optional[str] = None
    data_size: Optional[NonNegativeInt] = None
    data: Optional[PackageData] = Field(default=None, repr=False)

    additional_info: Optional[dict[str, Any]] = None

    @property
    def has_url(self) -> bool:
        return bool(self.url)

    @property
    def has_data(self) -> bool:
        return self.data is not None

    @property
    def effective_data_size(self) -> int:
        """The size used for quota accounting.

        The inline payload is always measured, the declared `data_size` only counts
            for packages without inline data.
        """
        if self.data is not None:
            return self.data.size
        if self.data_size is not None:
            return self.data_size
        return 0


class TenantProfileConfiguration(AliasEnabledModel):
    """Per-tenant limits, 0 means unlimited."""

    max_ota_packages_in_bytes: NonNegativeInt = 0
    max_resources_in_bytes: NonNegativeInt = 0

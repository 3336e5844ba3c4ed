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

from __future__ import annotations

from typing import Optional

from pydantic import SkipValidation
from simple_sqlite3_orm import ConstrainRepr, TableSpec, TypeAffinityRepr
from typing_extensions import Annotated

from ota_package_guard.common.model_spec import MsgPackedInfo


class OtaPackageTable(TableSpec):
    package_id: Annotated[str, ConstrainRepr("PRIMARY KEY"), SkipValidation]
    tenant_id: Annotated[str, ConstrainRepr("NOT NULL"), SkipValidation]
    device_profile_id: Optional[str] = None
    created_time: Optional[int] = None

    type: Optional[str] = None
    title: Optional[str] = None
    version: Optional[str] = None
    tag: Optional[str] = None
    url: Optional[str] = None

    file_name: Optional[str] = None
    content_type: Optional[str] = None
    checksum_algorithm: Optional[str] = None
    checksum: Optional[str] = None
    data_size: Optional[int] = None
    data: Optional[bytes] = None

    additional_info: Annotated[Optional[MsgPackedInfo], TypeAffinityRepr(bytes)] = None

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

from pathlib import Path
from typing import Union

import yaml
from pydantic import BaseModel, ConfigDict, PositiveInt
from typing_extensions import Self

from ota_package_guard.common.io import DEFAULT_READ_CHUNK_SIZE

DEFAULT_MAX_FIELD_LENGTH = 255


class ValidatorConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    verify_integrity_on_update: bool = False
    """Also verify the checksum when an update carries data."""

    max_field_length: PositiveInt = DEFAULT_MAX_FIELD_LENGTH
    checksum_read_size: PositiveInt = DEFAULT_READ_CHUNK_SIZE

    @classmethod
    def load_yaml(cls, fpath: Union[str, Path]) -> Self:
        _raw = yaml.safe_load(Path(fpath).read_text())
        if _raw is None:  # an empty config file
            return cls()
        return cls.model_validate(_raw)

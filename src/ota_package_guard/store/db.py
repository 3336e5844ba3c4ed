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

import contextlib
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Generator, Optional
from uuid import UUID

from simple_sqlite3_orm import CreateIndexParams, ORMBase, gen_sql_stmt
from simple_sqlite3_orm.utils import enable_wal_mode

from ota_package_guard.common.model_spec import MsgPackedInfo, StrOrPath
from ota_package_guard.errors import PackageStoreUnavailable
from ota_package_guard.schema import OtaPackage, PackageData

from . import OTA_PACKAGE_TABLE_NAME
from .schema import OtaPackageTable

logger = logging.getLogger(__name__)

DB_TIMEOUT = 16  # seconds


class _OtaPackageTableConfig:
    orm_bootstrap_table_name = OTA_PACKAGE_TABLE_NAME
    orm_bootstrap_indexes_params = [
        CreateIndexParams(index_name="ota_package_tenant_idx", index_cols=("tenant_id",))
    ]


class OtaPackageORM(ORMBase[OtaPackageTable], _OtaPackageTableConfig):
    orm_bootstrap_table_name = OTA_PACKAGE_TABLE_NAME


class OtaPackageDBHelper:
    def __init__(self, db_f: StrOrPath) -> None:
        self.db_f = db_f

    def bootstrap_db(self) -> None:
        with closing(self.connect_db()) as conn:
            orm = OtaPackageORM(conn)
            orm.orm_bootstrap_db()

    def connect_db(self, *, enable_wal: bool = False) -> sqlite3.Connection:
        _conn = sqlite3.connect(self.db_f, check_same_thread=False, timeout=DB_TIMEOUT)
        if enable_wal:
            enable_wal_mode(_conn)
        return _conn

    def get_orm(self, conn: sqlite3.Connection | None = None) -> OtaPackageORM:
        """Get ORM instance for the ota_package table."""
        if conn is not None:
            return OtaPackageORM(conn)
        return OtaPackageORM(self.connect_db())


def to_table_entry(pkg: OtaPackage) -> OtaPackageTable:
    if pkg.id is None or pkg.tenant_id is None:
        raise ValueError("OtaPackage without id or tenant_id cannot be stored")

    _data = _data_size = None
    if pkg.data is not None:
        _data = pkg.data.read_bytes()
        _data_size = len(_data)
    return OtaPackageTable(
        package_id=str(pkg.id),
        tenant_id=str(pkg.tenant_id),
        device_profile_id=str(pkg.device_profile_id) if pkg.device_profile_id else None,
        created_time=pkg.created_time,
        type=pkg.type.value if pkg.type else None,
        title=pkg.title,
        version=pkg.version,
        tag=pkg.tag,
        url=pkg.url,
        file_name=pkg.file_name,
        content_type=pkg.content_type,
        checksum_algorithm=(
            pkg.checksum_algorithm.value if pkg.checksum_algorithm else None
        ),
        checksum=pkg.checksum,
        data_size=_data_size,
        data=_data,
        additional_info=(
            MsgPackedInfo(pkg.additional_info) if pkg.additional_info else None
        ),
    )


def from_table_entry(entry: OtaPackageTable) -> OtaPackage:
    return OtaPackage(
        id=UUID(entry.package_id),
        tenant_id=UUID(entry.tenant_id),
        device_profile_id=entry.device_profile_id,
        created_time=entry.created_time,
        type=entry.type,
        title=entry.title,
        version=entry.version,
        tag=entry.tag,
        url=entry.url,
        file_name=entry.file_name,
        content_type=entry.content_type,
        checksum_algorithm=entry.checksum_algorithm,
        checksum=entry.checksum,
        data_size=entry.data_size,
        data=PackageData(entry.data) if entry.data is not None else None,
        additional_info=(
            dict(entry.additional_info) if entry.additional_info is not None else None
        ),
    )


class SqliteOtaPackageDao:
    """OTA package data-access implementation backed by sqlite3.

    sqlite3 errors are raised as PackageStoreUnavailable.
    """

    # fmt: off
    SUM_DATA_SIZE_BY_TENANT = gen_sql_stmt(
        "SELECT", "COALESCE(SUM(data_size), 0)",
        "FROM", OTA_PACKAGE_TABLE_NAME,
        "WHERE", "tenant_id = ?",
    )
    SUM_DATA_SIZE_BY_TENANT_EXCLUDE = gen_sql_stmt(
        "SELECT", "COALESCE(SUM(data_size), 0)",
        "FROM", OTA_PACKAGE_TABLE_NAME,
        "WHERE", "tenant_id = ? AND package_id != ?",
    )
    # fmt: on

    def __init__(self, db_helper: OtaPackageDBHelper) -> None:
        self._db_helper = db_helper

    @contextlib.contextmanager
    def _orm(self, _op: str) -> Generator[OtaPackageORM]:
        try:
            with self._db_helper.get_orm() as orm:
                yield orm
        except sqlite3.Error as e:
            logger.error(f"failed to {_op} in {self._db_helper.db_f}: {e!r}", exc_info=e)
            raise PackageStoreUnavailable(f"failed to {_op}: {e!r}") from e

    def find_by_id(self, tenant_id: UUID, package_id: UUID) -> Optional[OtaPackage]:
        with self._orm("find OtaPackage") as orm:
            _entry = orm.orm_select_entry(
                package_id=str(package_id), tenant_id=str(tenant_id)
            )
        if _entry is None:
            return None
        return from_table_entry(_entry)

    def sum_data_size_by_tenant(
        self, tenant_id: UUID, exclude_id: Optional[UUID] = None
    ) -> int:
        with self._orm("sum OtaPackage data size") as orm:
            if exclude_id is None:
                _cur = orm.orm_con.execute(
                    self.SUM_DATA_SIZE_BY_TENANT, (str(tenant_id),)
                )
            else:
                _cur = orm.orm_con.execute(
                    self.SUM_DATA_SIZE_BY_TENANT_EXCLUDE,
                    (str(tenant_id), str(exclude_id)),
                )
            (_sum,) = _cur.fetchone()
        return int(_sum)

    def save(self, pkg: OtaPackage) -> None:
        """Insert <pkg>, or replace the existing one with the same id."""
        _entry = to_table_entry(pkg)
        with self._orm("save OtaPackage") as orm:
            orm.orm_insert_entry(_entry, or_option="replace")
            orm.orm_con.commit()
        logger.debug(f"OtaPackage {pkg.id} is saved")

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
"""Validate an OTA package manifest against a package store and tenant profiles."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

import yaml
from pydantic import ValidationError

from ota_package_guard.config import ValidatorConfig
from ota_package_guard.errors import DataValidationError
from ota_package_guard.profile_cache import TenantProfileCache
from ota_package_guard.schema import OtaPackage, PackageData
from ota_package_guard.store.db import OtaPackageDBHelper, SqliteOtaPackageDao
from ota_package_guard.validator import OtaPackageDataValidator
from ota_package_guard_tools._utils import exit_with_err_msg

if TYPE_CHECKING:
    from argparse import ArgumentParser, Namespace, _SubParsersAction

logger = logging.getLogger(__name__)


def load_package_manifest(manifest: Path, payload: Path | None = None) -> OtaPackage:
    """Load an OtaPackage from a JSON or YAML manifest.

    In the manifest, `data` refers to the payload file path, relative to the manifest.
    If <payload> is specified, it overrides the `data` in the manifest.
    """
    _raw: Any = yaml.safe_load(manifest.read_text())  # JSON is also valid YAML
    if not isinstance(_raw, dict):
        raise ValueError(f"{manifest} doesn't contain a mapping")

    if payload is not None:
        _raw["data"] = payload
    elif _data_fpath := _raw.get("data"):
        _raw["data"] = manifest.parent / _data_fpath
    return OtaPackage.model_validate(_raw)


def validate_cmd_args(
    sub_arg_parser: _SubParsersAction[ArgumentParser], *parent_parser: ArgumentParser
) -> None:
    validate_arg_parser = sub_arg_parser.add_parser(
        name="validate",
        help=(_help_txt := "Validate an OTA package before creating or updating it"),
        description=_help_txt,
        parents=parent_parser,
    )
    validate_arg_parser.add_argument(
        "--db",
        required=True,
        help="The OTA package store database, will be created if not exists.",
    )
    validate_arg_parser.add_argument(
        "--profiles",
        required=True,
        help="YAML file of the tenant profiles.",
    )
    validate_arg_parser.add_argument(
        "--config",
        help="YAML file of the validator configuration.",
    )
    validate_arg_parser.add_argument(
        "--tenant-id",
        help="The tenant this operation runs for, default to the `tenantId` in manifest.",
    )
    validate_arg_parser.add_argument(
        "--payload",
        help="The package payload file, overrides the `data` in the manifest.",
    )
    validate_arg_parser.add_argument(
        "--save",
        action="store_true",
        help="Save the package into the store after it passes validation.",
    )
    validate_arg_parser.add_argument(
        "manifest",
        help="The JSON or YAML file describing the OTA package.",
    )
    validate_arg_parser.set_defaults(handler=validate_cmd)


def validate_cmd(args: Namespace) -> None:
    logger.debug(f"calling {validate_cmd.__name__} with {args}")
    manifest = Path(args.manifest)
    if not manifest.is_file():
        exit_with_err_msg(f"{manifest} is not a file!")

    try:
        pkg = load_package_manifest(
            manifest, Path(args.payload) if args.payload else None
        )
    except (ValueError, ValidationError) as e:
        exit_with_err_msg(f"invalid package manifest {manifest}: {e}")

    tenant_id = UUID(args.tenant_id) if args.tenant_id else pkg.tenant_id
    if tenant_id is None:
        exit_with_err_msg("tenant is not specified by --tenant-id nor the manifest!")

    db_helper = OtaPackageDBHelper(args.db)
    if not Path(args.db).is_file():
        db_helper.bootstrap_db()
    dao = SqliteOtaPackageDao(db_helper)
    config = ValidatorConfig.load_yaml(args.config) if args.config else None
    validator = OtaPackageDataValidator(
        dao, TenantProfileCache.load_yaml(args.profiles), config=config
    )

    try:
        validator.validate(tenant_id, pkg)
    except DataValidationError as e:
        exit_with_err_msg(f"{e.reason.value}: {e}")
    print(f"OtaPackage {pkg.title}:{pkg.version} is valid.")

    if args.save:
        if pkg.id is None:
            pkg = pkg.model_copy(
                update={"id": uuid4(), "created_time": int(time.time() * 1000)}
            )
        dao.save(pkg)
        print(f"OtaPackage is saved with id {pkg.id}.")

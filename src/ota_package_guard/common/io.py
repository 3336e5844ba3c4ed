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
"""Common shared helper functions for IO."""

from __future__ import annotations

import hashlib
import io
import sys
from pathlib import Path
from typing import IO, Any, Callable, Union

DEFAULT_READ_CHUNK_SIZE = 8 * 1024**2  # 8MiB

DigestFactory = Union[str, Callable[[], Any]]


def _read_digest(
    fileobj: IO[bytes], digest: DigestFactory, /, *, _bufsize: int
) -> Any:
    """Basically a simpified copy from 3.11's hashlib.file_digest.

    Unlike the stdlib one, this also works with streams that don't
        implement `readinto`.
    """
    if isinstance(digest, str):
        digestobj = hashlib.new(digest)
    else:
        digestobj = digest()

    _readinto = getattr(fileobj, "readinto", None)
    if _readinto is None:
        while data := fileobj.read(_bufsize):
            digestobj.update(data)
        return digestobj

    buf = bytearray(_bufsize)  # Reusable buffer to reduce allocations.
    view = memoryview(buf)
    while size := _readinto(buf):
        digestobj.update(view[:size])
    return digestobj


if sys.version_info >= (3, 11):
    from hashlib import file_digest as _file_digest

    def _stream_digest(
        fileobj: IO[bytes], digest: DigestFactory, /, *, _bufsize: int
    ) -> Any:
        if isinstance(fileobj, (io.BufferedIOBase, io.RawIOBase)) and (
            hasattr(fileobj, "getbuffer") or fileobj.readable()
        ):
            return _file_digest(fileobj, digest, _bufsize=_bufsize)  # type: ignore[arg-type]
        return _read_digest(fileobj, digest, _bufsize=_bufsize)

else:
    _stream_digest = _read_digest


def cal_stream_digest(
    fileobj: IO[bytes],
    digest: DigestFactory,
    *,
    chunk_size: int = DEFAULT_READ_CHUNK_SIZE,
) -> Any:
    """Generate the digest of a binary stream with <digest> and return the hash object.

    <digest> is either a hashlib algorithm name, or a factory returning an object
        with `update` and `hexdigest` methods.
    """
    return _stream_digest(fileobj, digest, _bufsize=chunk_size)


def cal_file_digest(
    fpath: str | Path,
    digest: DigestFactory,
    chunk_size: int = DEFAULT_READ_CHUNK_SIZE,
) -> Any:
    """Generate file digest with <digest> and returns the hash object."""
    with open(fpath, "rb") as f:
        return cal_stream_digest(f, digest, chunk_size=chunk_size)

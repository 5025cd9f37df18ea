# SPDX-FileCopyrightText: Copyright (c) 2025 The Newton Developers
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""The core data types used throughout contactinfo."""

from __future__ import annotations

import functools
import itertools
import sys
from collections.abc import Iterable
from typing import Any, ClassVar, TypeVar

import numpy as np
import warp as wp

if sys.version_info >= (3, 12):
    from typing import override
else:
    from typing_extensions import override

###
# Module interface
###

__all__ = [
    "BodyIndex",
    "Devicelike",
    "FloatType",
    "GeometryId",
    "Scalar",
    "TypeSafeIndex",
    "Vec3",
    "as_vec3",
    "float32",
    "float64",
    "int32",
    "numpy_dtype_for",
    "override",
    "vec3d",
    "vec3f",
    "vec3_type_for",
]


###
# Scalars
###

int32 = wp.int32
float32 = wp.float32
float64 = wp.float64

FloatType = float32 | float64
"""The warp scalar types supported for device-side contact data."""

Devicelike = wp.Device | str | None
"""Anything warp accepts as a device: a device object, an alias such as ``"cpu"``, or ``None``."""

Scalar = TypeVar("Scalar")
"""
The scalar representation of contact data.\n
Any numeric type may be used (``float``, numpy scalars, warp scalars, ``Fraction``, ...).
"""


###
# Vectors
###

vec3f = wp.vec3f
vec3d = wp.vec3d

Vec3 = tuple[Scalar, Scalar, Scalar]
"""An immutable 3-vector holding one scalar per component."""

_VEC3_TYPES: dict[type, type] = {
    float32: vec3f,
    float64: vec3d,
}

_NUMPY_DTYPES: dict[type, type] = {
    float32: np.float32,
    float64: np.float64,
}


def vec3_type_for(dtype: Any) -> type:
    """Returns the warp 3-vector type whose components are of the given scalar type."""
    try:
        return _VEC3_TYPES[dtype]
    except (KeyError, TypeError) as err:
        raise TypeError(f"Unsupported scalar dtype: {dtype}. Expected `float32` or `float64`.") from err


def numpy_dtype_for(dtype: Any) -> type:
    """Returns the numpy scalar type matching a supported warp scalar type."""
    vec3_type_for(dtype)
    return _NUMPY_DTYPES[dtype]


def as_vec3(value: Iterable[Scalar], name: str = "vector") -> Vec3:
    """
    Converts a 3-component iterable into an immutable :data:`Vec3`.

    The components are kept as-is, so the scalar type of the input is preserved.

    Raises:
        ValueError: If the input does not have exactly three components.
    """
    components = tuple(value)
    if len(components) != 3:
        raise ValueError(f"{name} must have exactly 3 components, got {len(components)}.")
    return components


###
# Indices
###


@functools.total_ordering
class TypeSafeIndex:
    """
    Base class for opaque, non-negative integer identifiers.

    Indices of different concrete types never compare equal, neither to each
    other nor to raw integers, so that body indices cannot be mixed up with
    geometry identifiers or any other index space.
    """

    __slots__ = ("_value",)

    def __init__(self, value: int | TypeSafeIndex):
        if isinstance(value, TypeSafeIndex):
            if type(value) is not type(self):
                raise TypeError(f"{type(self).__name__}: cannot be constructed from a {type(value).__name__}.")
            value = value._value
        if isinstance(value, bool | np.bool_) or not isinstance(value, int | np.integer):
            raise TypeError(f"{type(self).__name__}: expected an integer, got {type(value).__name__}.")
        if value < 0:
            raise ValueError(f"{type(self).__name__}: index must be non-negative, got {value}.")
        object.__setattr__(self, "_value", int(value))

    @property
    def value(self) -> int:
        """The wrapped integer value."""
        return self._value

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable.")

    def __reduce__(self):
        return (type(self), (self._value,))

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    @override
    def __eq__(self, other):
        if type(other) is type(self):
            return self._value == other._value
        return NotImplemented

    def __lt__(self, other):
        if type(other) is type(self):
            return self._value < other._value
        return NotImplemented

    @override
    def __hash__(self):
        return hash((type(self).__name__, self._value))

    @override
    def __repr__(self):
        return f"{type(self).__name__}({self._value})"


class BodyIndex(TypeSafeIndex):
    """Index of a body registered in a multibody model."""

    __slots__ = ()

    @classmethod
    def world_index(cls) -> BodyIndex:
        """The index of the world body, which is always the first body of a model."""
        return cls(0)


class GeometryId(TypeSafeIndex):
    """Identifier of a collision geometry."""

    __slots__ = ()

    _next_id: ClassVar[itertools.count] = itertools.count(1)

    @classmethod
    def get_new_id(cls) -> GeometryId:
        """Returns a new identifier, unique within the running process."""
        return cls(next(cls._next_id))

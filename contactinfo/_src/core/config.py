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

"""
Provides types for holding configurations of contact results containers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .types import Devicelike, float32, vec3_type_for

###
# Module interface
###

__all__ = [
    "ContactResultsConfig",
]


###
# Types
###


@dataclass
class ContactResultsConfig:
    """
    A data container to hold host-side configurations of contact results.
    """

    dtype: Any = float32
    """
    Scalar type used when exporting contact results to device arrays.\n
    Must be either `float32` or `float64`.\n
    Defaults to `float32`.
    """

    requires_grad: bool = False
    """
    Set to `True` to allocate exported floating-point arrays with gradients.\n
    Defaults to `False`.
    """

    device: Devicelike = None
    """
    Device on which exported arrays are allocated.\n
    Defaults to `None`, i.e. the current warp device.
    """

    enforce_uniform_scalar: bool = True
    """
    Set to `True` to reject contacts whose scalar type differs from the
    contacts already held by the same results collection.\n
    Defaults to `True`.
    """

    def __post_init__(self) -> None:
        """
        Performs validation checks on the configuration values after initialization.
        """
        self.check_values()

    def check_values(self) -> None:
        """
        Validates configuration values.
        """
        vec3_type_for(self.dtype)
        if not isinstance(self.requires_grad, bool):
            raise ValueError(f"Invalid requires_grad: {self.requires_grad}. Must be a boolean.")
        if not isinstance(self.enforce_uniform_scalar, bool):
            raise ValueError(f"Invalid enforce_uniform_scalar: {self.enforce_uniform_scalar}. Must be a boolean.")

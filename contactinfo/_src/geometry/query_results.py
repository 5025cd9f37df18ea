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

"""Defines the point-pair record reported by penetration queries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic

from ..core.types import GeometryId, Scalar, Vec3, as_vec3, override

###
# Module interface
###

__all__ = [
    "PenetrationAsPointPair",
]


###
# Types
###


@dataclass(frozen=True)
class PenetrationAsPointPair(Generic[Scalar]):
    """
    The characterization of the intersection of two penetrating geometries.

    The characterization consists of a pair of points and a normal. The points
    represent a point on each geometry that most deeply penetrates the other
    geometry, and the normal points from geometry B into geometry A. All
    quantities are measured and expressed in the world frame W.

    Attributes:
        id_A (GeometryId): The id of the first geometry in the contact.
        id_B (GeometryId): The id of the second geometry in the contact.
        p_WCa (Vec3): The point on A that most deeply penetrates B.
        p_WCb (Vec3): The point on B that most deeply penetrates A.
        nhat_BA_W (Vec3): The unit-length normal which defines the penetration direction.
        depth (Scalar): The penetration depth, always non-negative.
    """

    id_A: GeometryId
    id_B: GeometryId
    p_WCa: Vec3
    p_WCb: Vec3
    nhat_BA_W: Vec3
    depth: Scalar

    def __post_init__(self):
        # Vectors are held as tuples so the record cannot be altered in place
        object.__setattr__(self, "id_A", GeometryId(self.id_A))
        object.__setattr__(self, "id_B", GeometryId(self.id_B))
        object.__setattr__(self, "p_WCa", as_vec3(self.p_WCa, "PenetrationAsPointPair: p_WCa"))
        object.__setattr__(self, "p_WCb", as_vec3(self.p_WCb, "PenetrationAsPointPair: p_WCb"))
        object.__setattr__(self, "nhat_BA_W", as_vec3(self.nhat_BA_W, "PenetrationAsPointPair: nhat_BA_W"))

    def swapped(self) -> PenetrationAsPointPair[Scalar]:
        """
        Returns the same penetration seen from the other geometry.

        The geometry ids and witness points are exchanged and the normal is
        negated, so that it still points from (the new) B into (the new) A.
        """
        return PenetrationAsPointPair(
            id_A=self.id_B,
            id_B=self.id_A,
            p_WCa=self.p_WCb,
            p_WCb=self.p_WCa,
            nhat_BA_W=tuple(-n for n in self.nhat_BA_W),
            depth=self.depth,
        )

    @override
    def __repr__(self) -> str:
        return (
            f"PenetrationAsPointPair(\n"
            f"id_A: {self.id_A},\n"
            f"id_B: {self.id_B},\n"
            f"p_WCa: {self.p_WCa},\n"
            f"p_WCb: {self.p_WCb},\n"
            f"nhat_BA_W: {self.nhat_BA_W},\n"
            f"depth: {self.depth},\n"
            f")"
        )

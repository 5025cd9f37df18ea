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

"""Defines the contact response between a pair of bodies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic

from ..core.types import BodyIndex, Scalar, TypeSafeIndex, Vec3, as_vec3, override
from ..geometry.query_results import PenetrationAsPointPair

###
# Module interface
###

__all__ = [
    "ContactInfo",
]


###
# Types
###


def _as_body_index(value: BodyIndex | int, name: str) -> BodyIndex:
    if isinstance(value, TypeSafeIndex) and not isinstance(value, BodyIndex):
        raise TypeError(f"ContactInfo: {name} must be a BodyIndex, got a {type(value).__name__}.")
    return BodyIndex(value)


@dataclass(frozen=True)
class ContactInfo(Generic[Scalar]):
    """
    The contact response between two bodies of the same multibody model.

    A ContactInfo holds the pair of contacting bodies, the resultant contact force,
    the contact point and the separation and slip speeds at that point, together
    with the point-pair record of the geometric query that detected the contact.

    Instances are immutable values. The class is generic over the scalar type so
    that the same record may hold plain floats or any other numeric representation;
    no arithmetic is ever performed on the stored scalars.

    Attributes:
        bodyA_id (BodyIndex): Index of body A in the contact pair.
            Body A is the body of the geometry ``point_pair.id_A``.
        bodyB_id (BodyIndex): Index of body B in the contact pair.
            Body B is the body of the geometry ``point_pair.id_B``.
        contact_force (Vec3): Force ``f_Bc_W`` on body B applied at the contact point C,
            expressed in the world frame W. The force on body A is its negation.
        contact_point (Vec3): Position ``p_WC`` of the contact point C in the world frame W.
        separation_speed (Scalar): Rate of change of the signed distance along the normal
            ``point_pair.nhat_BA_W``. Positive when the bodies move apart, negative when
            they approach each other.
        slip_speed (Scalar): Magnitude of the relative tangential velocity at the
            contact point. Never negative.
        point_pair (PenetrationAsPointPair): The record of the geometric query for this pair.

    Raises:
        ValueError: If both body indices are equal or if the slip speed is negative.
        TypeError: If a body is referenced by an index of another kind, e.g. a GeometryId.
    """

    bodyA_id: BodyIndex
    bodyB_id: BodyIndex
    contact_force: Vec3
    contact_point: Vec3
    separation_speed: Scalar
    slip_speed: Scalar
    point_pair: PenetrationAsPointPair[Scalar]

    def __post_init__(self):
        object.__setattr__(self, "bodyA_id", _as_body_index(self.bodyA_id, "bodyA_id"))
        object.__setattr__(self, "bodyB_id", _as_body_index(self.bodyB_id, "bodyB_id"))
        if self.bodyA_id == self.bodyB_id:
            raise ValueError(f"ContactInfo: bodyA_id and bodyB_id must differ, both are {self.bodyA_id}.")
        if self.slip_speed < 0:
            raise ValueError(f"ContactInfo: slip_speed must be non-negative, got {self.slip_speed}.")
        object.__setattr__(self, "contact_force", as_vec3(self.contact_force, "ContactInfo: contact_force"))
        object.__setattr__(self, "contact_point", as_vec3(self.contact_point, "ContactInfo: contact_point"))

    @property
    def scalar_type(self) -> type:
        """The type of the scalars held by this contact."""
        return type(self.separation_speed)

    @override
    def __repr__(self) -> str:
        return (
            f"ContactInfo(\n"
            f"bodyA_id: {self.bodyA_id},\n"
            f"bodyB_id: {self.bodyB_id},\n"
            f"contact_force: {self.contact_force},\n"
            f"contact_point: {self.contact_point},\n"
            f"separation_speed: {self.separation_speed},\n"
            f"slip_speed: {self.slip_speed},\n"
            f"point_pair: {self.point_pair!r},\n"
            f")"
        )

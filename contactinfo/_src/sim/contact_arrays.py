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
Provides a structure-of-arrays container for exporting contact results to warp devices,
together with kernels evaluating reporting quantities on them.
"""

from collections.abc import Sequence
from typing import Any

import numpy as np
import warp as wp

from ..core.types import Devicelike, float32, float64, int32, numpy_dtype_for, vec3_type_for
from ..utils import logger as msg
from .contact_info import ContactInfo

###
# Module interface
###

__all__ = [
    "ContactInfoArrays",
    "compute_body_net_forces",
    "compute_contact_force_norms",
]


###
# Module configs
###

wp.set_module_options({"enable_backward": True})

_INT32_MAX = int(np.iinfo(np.int32).max)
"""The largest index that fits the int32 index arrays."""


###
# Kernels
###


@wp.kernel
def _eval_contact_force_norms(
    # Inputs:
    contact_force: wp.array(dtype=Any),
    # Outputs:
    norm: wp.array(dtype=Any),
):
    cid = wp.tid()
    norm[cid] = wp.length(contact_force[cid])


@wp.kernel
def _eval_body_net_forces(
    # Inputs:
    bodyA_id: wp.array(dtype=int32),
    bodyB_id: wp.array(dtype=int32),
    contact_force: wp.array(dtype=Any),
    # Outputs:
    body_force: wp.array(dtype=Any),
):
    cid = wp.tid()
    f_Bc_W = contact_force[cid]
    wp.atomic_add(body_force, bodyB_id[cid], f_Bc_W)
    wp.atomic_sub(body_force, bodyA_id[cid], f_Bc_W)


for _scalar in (float32, float64):
    _vec3 = vec3_type_for(_scalar)
    wp.overload(
        _eval_contact_force_norms,
        {"contact_force": wp.array(dtype=_vec3), "norm": wp.array(dtype=_scalar)},
    )
    wp.overload(
        _eval_body_net_forces,
        {
            "bodyA_id": wp.array(dtype=int32),
            "bodyB_id": wp.array(dtype=int32),
            "contact_force": wp.array(dtype=_vec3),
            "body_force": wp.array(dtype=_vec3),
        },
    )


###
# Functions
###


def _as_int32_index(index, name: str) -> int:
    value = int(index)
    if value > _INT32_MAX:
        raise ValueError(f"ContactInfoArrays: {name} {value} exceeds the int32 range of the index arrays")
    return value


###
# Containers
###


class ContactInfoArrays:
    """
    An SoA-based container holding the contact results of one evaluation on a warp device.

    Each :class:`ContactInfo` field is laid out as one array of length ``capacity``. The
    floating-point arrays share a single scalar type (``float32`` or ``float64``) and, when
    ``requires_grad`` is set, carry gradients so that reporting quantities computed from
    them can be differentiated with a :class:`warp.Tape`.
    """

    def __init__(
        self,
        capacity: int = 0,
        dtype: Any = float32,
        requires_grad: bool = False,
        device: Devicelike = None,
    ):
        if capacity < 0:
            raise ValueError("ContactInfoArrays: capacity must be a non-negative integer")
        vec3 = vec3_type_for(dtype)

        self.capacity: int = capacity
        """The number of contacts for which storage is allocated."""

        self.num_contacts: int = 0
        """
        The number of active contacts, i.e. the leading entries holding valid data.\n
        Set by :meth:`assign`. Producers writing the arrays directly must set it themselves.
        """

        self.dtype = dtype
        """The scalar type of all floating-point arrays."""

        self.requires_grad: bool = requires_grad
        """Whether the floating-point arrays carry gradients."""

        with wp.ScopedDevice(device):
            self.bodyA_id: wp.array = wp.full(capacity, -1, dtype=int32)
            """
            Index of body A of each contact.\n
            Shape of ``(capacity,)`` and type :class:`int32`.
            """

            self.bodyB_id: wp.array = wp.full(capacity, -1, dtype=int32)
            """
            Index of body B of each contact.\n
            Shape of ``(capacity,)`` and type :class:`int32`.
            """

            self.contact_force: wp.array = wp.zeros(capacity, dtype=vec3, requires_grad=requires_grad)
            """
            Force on body B at the contact point, in world coordinates.\n
            Shape of ``(capacity,)`` and type :class:`vec3`.
            """

            self.contact_point: wp.array = wp.zeros(capacity, dtype=vec3, requires_grad=requires_grad)
            """
            Position of the contact point in world coordinates.\n
            Shape of ``(capacity,)`` and type :class:`vec3`.
            """

            self.separation_speed: wp.array = wp.zeros(capacity, dtype=dtype, requires_grad=requires_grad)
            """
            Separation speed along the contact normal (positive when separating).\n
            Shape of ``(capacity,)`` and scalar type ``dtype``.
            """

            self.slip_speed: wp.array = wp.zeros(capacity, dtype=dtype, requires_grad=requires_grad)
            """
            Magnitude of the tangential velocity at the contact point.\n
            Shape of ``(capacity,)`` and scalar type ``dtype``.
            """

            self.id_A: wp.array = wp.full(capacity, -1, dtype=int32)
            """
            Geometry id of side A of each point pair.\n
            Shape of ``(capacity,)`` and type :class:`int32`.
            """

            self.id_B: wp.array = wp.full(capacity, -1, dtype=int32)
            """
            Geometry id of side B of each point pair.\n
            Shape of ``(capacity,)`` and type :class:`int32`.
            """

            self.p_WCa: wp.array = wp.zeros(capacity, dtype=vec3, requires_grad=requires_grad)
            """
            Witness point on A of each point pair, in world coordinates.\n
            Shape of ``(capacity,)`` and type :class:`vec3`.
            """

            self.p_WCb: wp.array = wp.zeros(capacity, dtype=vec3, requires_grad=requires_grad)
            """
            Witness point on B of each point pair, in world coordinates.\n
            Shape of ``(capacity,)`` and type :class:`vec3`.
            """

            self.nhat_BA_W: wp.array = wp.zeros(capacity, dtype=vec3, requires_grad=requires_grad)
            """
            Unit normal pointing from B into A of each point pair, in world coordinates.\n
            Shape of ``(capacity,)`` and type :class:`vec3`.
            """

            self.depth: wp.array = wp.zeros(capacity, dtype=dtype, requires_grad=requires_grad)
            """
            Penetration depth of each point pair.\n
            Shape of ``(capacity,)`` and scalar type ``dtype``.
            """

        msg.debug(f"ContactInfoArrays: allocated {capacity} contacts of {dtype.__name__} on {self.device}")

    @property
    def device(self) -> wp.Device:
        """
        Returns the device on which the contact arrays are allocated.
        """
        return self.contact_force.device

    def assign(self, contacts: Sequence[ContactInfo]):
        """
        Copies host-side contacts into the leading entries of the arrays.

        Scalars are converted to the array dtype through numpy; the remaining entries are
        reset to their defaults.

        Raises:
            ValueError: If there are more contacts than the allocated capacity, or if an index
                does not fit in ``int32``.
        """
        n = len(contacts)
        if n > self.capacity:
            raise ValueError(f"ContactInfoArrays: cannot assign {n} contacts to a capacity of {self.capacity}")

        fdtype = numpy_dtype_for(self.dtype)
        bodyA_id = np.full(self.capacity, -1, dtype=np.int32)
        bodyB_id = np.full(self.capacity, -1, dtype=np.int32)
        id_A = np.full(self.capacity, -1, dtype=np.int32)
        id_B = np.full(self.capacity, -1, dtype=np.int32)
        contact_force = np.zeros((self.capacity, 3), dtype=fdtype)
        contact_point = np.zeros((self.capacity, 3), dtype=fdtype)
        p_WCa = np.zeros((self.capacity, 3), dtype=fdtype)
        p_WCb = np.zeros((self.capacity, 3), dtype=fdtype)
        nhat_BA_W = np.zeros((self.capacity, 3), dtype=fdtype)
        separation_speed = np.zeros(self.capacity, dtype=fdtype)
        slip_speed = np.zeros(self.capacity, dtype=fdtype)
        depth = np.zeros(self.capacity, dtype=fdtype)

        for i, info in enumerate(contacts):
            point_pair = info.point_pair
            bodyA_id[i] = _as_int32_index(info.bodyA_id, "bodyA_id")
            bodyB_id[i] = _as_int32_index(info.bodyB_id, "bodyB_id")
            id_A[i] = _as_int32_index(point_pair.id_A, "id_A")
            id_B[i] = _as_int32_index(point_pair.id_B, "id_B")
            contact_force[i] = [float(f) for f in info.contact_force]
            contact_point[i] = [float(p) for p in info.contact_point]
            p_WCa[i] = [float(p) for p in point_pair.p_WCa]
            p_WCb[i] = [float(p) for p in point_pair.p_WCb]
            nhat_BA_W[i] = [float(n) for n in point_pair.nhat_BA_W]
            separation_speed[i] = float(info.separation_speed)
            slip_speed[i] = float(info.slip_speed)
            depth[i] = float(point_pair.depth)

        self.bodyA_id.assign(bodyA_id)
        self.bodyB_id.assign(bodyB_id)
        self.id_A.assign(id_A)
        self.id_B.assign(id_B)
        self.contact_force.assign(contact_force)
        self.contact_point.assign(contact_point)
        self.p_WCa.assign(p_WCa)
        self.p_WCb.assign(p_WCb)
        self.nhat_BA_W.assign(nhat_BA_W)
        self.separation_speed.assign(separation_speed)
        self.slip_speed.assign(slip_speed)
        self.depth.assign(depth)
        self.num_contacts = n

    def zero(self):
        """
        Resets all contact data to defaults and the active count to zero.
        """
        self.num_contacts = 0
        self.bodyA_id.fill_(-1)
        self.bodyB_id.fill_(-1)
        self.id_A.fill_(-1)
        self.id_B.fill_(-1)
        self.contact_force.zero_()
        self.contact_point.zero_()
        self.separation_speed.zero_()
        self.slip_speed.zero_()
        self.p_WCa.zero_()
        self.p_WCb.zero_()
        self.nhat_BA_W.zero_()
        self.depth.zero_()


###
# Launchers
###


def compute_contact_force_norms(arrays: ContactInfoArrays, norms: wp.array | None = None) -> wp.array:
    """
    Evaluates the magnitude of the contact force of each active contact.

    Args:
        arrays: The contact arrays to read from.
        norms: Optional output array of the arrays' scalar type and at least
            ``arrays.num_contacts`` entries. Allocated when omitted.

    Returns:
        The array of force magnitudes.
    """
    if norms is None:
        norms = wp.zeros(
            arrays.num_contacts, dtype=arrays.dtype, requires_grad=arrays.requires_grad, device=arrays.device
        )
    if arrays.num_contacts > 0:
        wp.launch(
            _eval_contact_force_norms,
            dim=arrays.num_contacts,
            inputs=[arrays.contact_force],
            outputs=[norms],
            device=arrays.device,
        )
    return norms


def compute_body_net_forces(
    arrays: ContactInfoArrays, num_bodies: int, body_forces: wp.array | None = None
) -> wp.array:
    """
    Accumulates the net contact force acting on each body, in world coordinates.

    Each contact adds its force to body B and subtracts it from body A.

    Args:
        arrays: The contact arrays to read from.
        num_bodies: The number of bodies of the model.
        body_forces: Optional output array of ``num_bodies`` vectors into which forces are
            accumulated. Allocated with zeros when omitted.

    Returns:
        The array of net body forces.

    Raises:
        ValueError: If a contact references a body outside ``[0, num_bodies)``.
    """
    n = arrays.num_contacts
    if n > 0:
        bodies = np.concatenate((arrays.bodyA_id.numpy()[:n], arrays.bodyB_id.numpy()[:n]))
        if bodies.min() < 0 or bodies.max() >= num_bodies:
            raise ValueError(f"compute_body_net_forces: body indices must be in [0, {num_bodies})")
    if body_forces is None:
        body_forces = wp.zeros(
            num_bodies,
            dtype=vec3_type_for(arrays.dtype),
            requires_grad=arrays.requires_grad,
            device=arrays.device,
        )
    if n > 0:
        wp.launch(
            _eval_body_net_forces,
            dim=n,
            inputs=[arrays.bodyA_id, arrays.bodyB_id, arrays.contact_force],
            outputs=[body_forces],
            device=arrays.device,
        )
    return body_forces

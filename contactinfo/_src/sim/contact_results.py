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

"""Defines the ordered collection of contact results of a single evaluation."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Generic

import numpy as np

from ..core.config import ContactResultsConfig
from ..core.types import BodyIndex, GeometryId, Scalar, Vec3
from ..geometry.query_results import PenetrationAsPointPair
from ..utils import logger as msg
from .contact_arrays import ContactInfoArrays
from .contact_info import ContactInfo

###
# Module interface
###

__all__ = [
    "ContactResults",
]


###
# Interfaces
###


class ContactResults(Generic[Scalar]):
    """
    A container to hold the contact results of one evaluation of a multibody model.

    The results are an ordered sequence of :class:`ContactInfo`, one per contacting
    body pair. The collection is filled by the producer of the evaluation and read by
    reporting or visualization consumers; the contacts themselves are immutable.
    """

    def __init__(self, config: ContactResultsConfig | None = None):
        self._config: ContactResultsConfig = config if config is not None else ContactResultsConfig()
        self._contacts: list[ContactInfo[Scalar]] = []

    @property
    def config(self) -> ContactResultsConfig:
        """The configuration of this results collection."""
        return self._config

    def add_contact_info(self, info: ContactInfo[Scalar]):
        """
        Appends the contact information of one body pair.

        Raises:
            TypeError: If ``info`` is not a ContactInfo, or if uniform scalars are enforced
                and its scalar type differs from that of the contacts already held.
        """
        if not isinstance(info, ContactInfo):
            raise TypeError(f"ContactResults: expected a ContactInfo, got {type(info).__name__}.")
        if self._config.enforce_uniform_scalar and self._contacts:
            expected = self._contacts[0].scalar_type
            if info.scalar_type is not expected:
                raise TypeError(
                    f"ContactResults: scalar type {info.scalar_type.__name__} does not match "
                    f"the scalar type {expected.__name__} of the held contacts."
                )
        self._contacts.append(info)
        msg.debug(f"ContactResults: added contact between {info.bodyA_id} and {info.bodyB_id}")

    def num_point_pair_contacts(self) -> int:
        """Returns the number of point-pair contacts."""
        return len(self._contacts)

    def point_pair_contact_info(self, i: int) -> ContactInfo[Scalar]:
        """
        Returns the i-th point-pair contact.

        Raises:
            IndexError: If ``i`` is outside ``[0, num_point_pair_contacts())``.
        """
        if i < 0 or i >= len(self._contacts):
            raise IndexError(f"ContactResults: index {i} out of range [0, {len(self._contacts)}).")
        return self._contacts[i]

    def clear(self):
        """
        Removes all contacts.
        """
        self._contacts.clear()

    def select_subset(self, selector: Callable[[ContactInfo[Scalar]], bool]) -> ContactResults[Scalar]:
        """Returns a new collection holding, in order, the contacts for which ``selector`` is true."""
        subset = ContactResults(self._config)
        subset._contacts = [info for info in self._contacts if selector(info)]
        return subset

    def net_force_on_body(self, body: BodyIndex | int) -> Vec3:
        """
        Returns the sum of the contact forces acting on a body, expressed in the world frame.

        Each contact applies ``contact_force`` on its body B and the opposite force on its
        body A. Returns a zero vector when the body takes part in no contact.
        """
        body = BodyIndex(body)
        net = (0, 0, 0)
        for info in self._contacts:
            if info.bodyB_id == body:
                net = tuple(n + f for n, f in zip(net, info.contact_force, strict=True))
            elif info.bodyA_id == body:
                net = tuple(n - f for n, f in zip(net, info.contact_force, strict=True))
        return net

    def to_arrays(self, config: ContactResultsConfig | None = None) -> ContactInfoArrays:
        """
        Exports the contacts to a structure of warp arrays.

        Args:
            config: Export configuration (dtype, gradients, device). Defaults to the
                configuration of this collection.
        """
        config = config if config is not None else self._config
        arrays = ContactInfoArrays(
            capacity=len(self._contacts),
            dtype=config.dtype,
            requires_grad=config.requires_grad,
            device=config.device,
        )
        if self._contacts:
            arrays.assign(self._contacts)
        msg.debug(f"ContactResults: exported {len(self._contacts)} contacts to device {arrays.device}")
        return arrays

    @classmethod
    def from_arrays(
        cls, arrays: ContactInfoArrays, config: ContactResultsConfig | None = None
    ) -> ContactResults[float]:
        """Builds host-side results of Python floats from the first ``arrays.num_contacts`` entries."""
        results = cls(config)
        n = arrays.num_contacts
        if n == 0:
            return results
        bodyA_id = arrays.bodyA_id.numpy()
        bodyB_id = arrays.bodyB_id.numpy()
        contact_force = arrays.contact_force.numpy().astype(np.float64)
        contact_point = arrays.contact_point.numpy().astype(np.float64)
        separation_speed = arrays.separation_speed.numpy().astype(np.float64)
        slip_speed = arrays.slip_speed.numpy().astype(np.float64)
        id_A = arrays.id_A.numpy()
        id_B = arrays.id_B.numpy()
        p_WCa = arrays.p_WCa.numpy().astype(np.float64)
        p_WCb = arrays.p_WCb.numpy().astype(np.float64)
        nhat_BA_W = arrays.nhat_BA_W.numpy().astype(np.float64)
        depth = arrays.depth.numpy().astype(np.float64)
        for i in range(n):
            point_pair = PenetrationAsPointPair(
                id_A=GeometryId(int(id_A[i])),
                id_B=GeometryId(int(id_B[i])),
                p_WCa=p_WCa[i].tolist(),
                p_WCb=p_WCb[i].tolist(),
                nhat_BA_W=nhat_BA_W[i].tolist(),
                depth=float(depth[i]),
            )
            results.add_contact_info(
                ContactInfo(
                    bodyA_id=BodyIndex(int(bodyA_id[i])),
                    bodyB_id=BodyIndex(int(bodyB_id[i])),
                    contact_force=contact_force[i].tolist(),
                    contact_point=contact_point[i].tolist(),
                    separation_speed=float(separation_speed[i]),
                    slip_speed=float(slip_speed[i]),
                    point_pair=point_pair,
                )
            )
        return results

    def __len__(self) -> int:
        return len(self._contacts)

    def __iter__(self) -> Iterator[ContactInfo[Scalar]]:
        return iter(self._contacts)

    def __getitem__(self, i: int) -> ContactInfo[Scalar]:
        return self.point_pair_contact_info(i)

    def __repr__(self) -> str:
        return f"ContactResults(num_point_pair_contacts={len(self._contacts)})"

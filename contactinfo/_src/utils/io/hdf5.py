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
Input/Output of contact results as flat HDF5 records.

Each contact is stored as a group holding the body indices, force, point,
separation and slip speeds, and a ``point_pair`` sub-group for the
geometric query record. A collection of contacts is stored as
``<namespace>/num_contacts`` plus one group per contact under
``<namespace>/contacts/<i>``.
"""

import h5py
import numpy as np

from ...core.config import ContactResultsConfig
from ...core.types import BodyIndex, GeometryId
from ...geometry.query_results import PenetrationAsPointPair
from ...sim.contact_info import ContactInfo
from ...sim.contact_results import ContactResults
from .. import logger as msg

###
# Module interface
###

__all__ = [
    "ContactInfoData",
    "PointPairData",
    "load_contact_results",
    "store_contact_results",
]

_UINT32_MAX = int(np.iinfo(np.uint32).max)


###
# Functions
###


def _as_uint32_id(value: int, name: str, owner: str) -> np.uint32:
    if value > _UINT32_MAX:
        raise ValueError(f"{owner}: {name} {value} exceeds the uint32 range of stored ids")
    return np.uint32(value)


###
# Containers
###


# NumPy-based container for the PenetrationAsPointPair data loaded from HDF5
class PointPairData:
    def __init__(self, dataset=None, dtype=np.float64, itype=np.int64):
        self.id_A: int = -1
        self.id_B: int = -1
        self.p_WCa: np.ndarray = np.zeros((3,), dtype=dtype)
        self.p_WCb: np.ndarray = np.zeros((3,), dtype=dtype)
        self.nhat_BA_W: np.ndarray = np.zeros((3,), dtype=dtype)
        self.depth: float = 0.0
        if dataset is not None:
            self.load(dataset, dtype, itype)

    def __repr__(self):
        return f"PointPairData(\
            \nid_A={self.id_A},\
            \nid_B={self.id_B},\
            \np_WCa={self.p_WCa},\
            \np_WCb={self.p_WCb},\
            \nnhat_BA_W={self.nhat_BA_W},\
            \ndepth={self.depth})"

    @classmethod
    def from_point_pair(cls, point_pair: PenetrationAsPointPair) -> "PointPairData":
        data = cls()
        data.id_A = int(point_pair.id_A)
        data.id_B = int(point_pair.id_B)
        data.p_WCa[:] = [float(p) for p in point_pair.p_WCa]
        data.p_WCb[:] = [float(p) for p in point_pair.p_WCb]
        data.nhat_BA_W[:] = [float(n) for n in point_pair.nhat_BA_W]
        data.depth = float(point_pair.depth)
        return data

    def to_point_pair(self) -> PenetrationAsPointPair[float]:
        return PenetrationAsPointPair(
            id_A=GeometryId(self.id_A),
            id_B=GeometryId(self.id_B),
            p_WCa=self.p_WCa.tolist(),
            p_WCb=self.p_WCb.tolist(),
            nhat_BA_W=self.nhat_BA_W.tolist(),
            depth=float(self.depth),
        )

    def load(self, dataset, dtype=np.float64, itype=np.int64):
        self.id_A = int(dataset["id_A"][()].astype(itype))
        self.id_B = int(dataset["id_B"][()].astype(itype))
        self.p_WCa[:] = dataset["p_WCa"][:].astype(dtype)
        self.p_WCb[:] = dataset["p_WCb"][:].astype(dtype)
        self.nhat_BA_W[:] = dataset["nhat_BA_W"][:].astype(dtype)
        self.depth = float(dataset["depth"][()].astype(dtype))

    def store(self, dataset, namespace: str = ""):
        dataset[namespace + "/id_A"] = _as_uint32_id(self.id_A, "id_A", "PointPairData")
        dataset[namespace + "/id_B"] = _as_uint32_id(self.id_B, "id_B", "PointPairData")
        dataset[namespace + "/p_WCa"] = self.p_WCa.astype(np.float64)
        dataset[namespace + "/p_WCb"] = self.p_WCb.astype(np.float64)
        dataset[namespace + "/nhat_BA_W"] = self.nhat_BA_W.astype(np.float64)
        dataset[namespace + "/depth"] = np.float64(self.depth)


# NumPy-based container for the ContactInfo data loaded from HDF5
class ContactInfoData:
    def __init__(self, dataset=None, dtype=np.float64, itype=np.int64):
        self.bodyA_id: int = -1
        self.bodyB_id: int = -1
        self.force: np.ndarray = np.zeros((3,), dtype=dtype)
        self.point: np.ndarray = np.zeros((3,), dtype=dtype)
        self.separation_speed: float = 0.0
        self.slip_speed: float = 0.0
        self.point_pair: PointPairData = PointPairData(dtype=dtype, itype=itype)
        if dataset is not None:
            self.load(dataset, dtype, itype)

    def __repr__(self):
        return f"ContactInfoData(\
            \nbodyA_id={self.bodyA_id},\
            \nbodyB_id={self.bodyB_id},\
            \nforce={self.force},\
            \npoint={self.point},\
            \nseparation_speed={self.separation_speed},\
            \nslip_speed={self.slip_speed},\
            \npoint_pair={self.point_pair})"

    @classmethod
    def from_contact_info(cls, info: ContactInfo) -> "ContactInfoData":
        data = cls()
        data.bodyA_id = int(info.bodyA_id)
        data.bodyB_id = int(info.bodyB_id)
        data.force[:] = [float(f) for f in info.contact_force]
        data.point[:] = [float(p) for p in info.contact_point]
        data.separation_speed = float(info.separation_speed)
        data.slip_speed = float(info.slip_speed)
        data.point_pair = PointPairData.from_point_pair(info.point_pair)
        return data

    def to_contact_info(self) -> ContactInfo[float]:
        return ContactInfo(
            bodyA_id=BodyIndex(self.bodyA_id),
            bodyB_id=BodyIndex(self.bodyB_id),
            contact_force=self.force.tolist(),
            contact_point=self.point.tolist(),
            separation_speed=float(self.separation_speed),
            slip_speed=float(self.slip_speed),
            point_pair=self.point_pair.to_point_pair(),
        )

    def load(self, dataset, dtype=np.float64, itype=np.int64):
        self.bodyA_id = int(dataset["bodyA_id"][()].astype(itype))
        self.bodyB_id = int(dataset["bodyB_id"][()].astype(itype))
        self.force[:] = dataset["force"][:].astype(dtype)
        self.point[:] = dataset["point"][:].astype(dtype)
        self.separation_speed = float(dataset["separation_speed"][()].astype(dtype))
        self.slip_speed = float(dataset["slip_speed"][()].astype(dtype))
        self.point_pair = PointPairData(dataset["point_pair"], dtype, itype)

    def store(self, dataset, namespace: str = ""):
        dataset[namespace + "/bodyA_id"] = _as_uint32_id(self.bodyA_id, "bodyA_id", "ContactInfoData")
        dataset[namespace + "/bodyB_id"] = _as_uint32_id(self.bodyB_id, "bodyB_id", "ContactInfoData")
        dataset[namespace + "/force"] = self.force.astype(np.float64)
        dataset[namespace + "/point"] = self.point.astype(np.float64)
        dataset[namespace + "/separation_speed"] = np.float64(self.separation_speed)
        dataset[namespace + "/slip_speed"] = np.float64(self.slip_speed)
        self.point_pair.store(dataset, namespace + "/point_pair")


###
# Collections
###


def store_contact_results(results: ContactResults, dataset: h5py.File | h5py.Group, namespace: str = ""):
    """
    Stores all contacts of a results collection as flat records.

    Args:
        results: The contact results to store.
        dataset: The HDF5 file or group to write into.
        namespace: Path of the group holding the records, relative to ``dataset``.
    """
    dataset[namespace + "/num_contacts"] = np.uint32(len(results))
    for i, info in enumerate(results):
        ContactInfoData.from_contact_info(info).store(dataset, f"{namespace}/contacts/{i}")
    msg.info(f"Stored {len(results)} contacts under '{namespace or '/'}'")


def load_contact_results(
    dataset: h5py.File | h5py.Group, namespace: str = "", config: ContactResultsConfig | None = None
) -> ContactResults[float]:
    """
    Loads a results collection written by :func:`store_contact_results`.

    Raises:
        KeyError: If the namespace does not hold stored contact results.
    """
    group = dataset[namespace] if namespace else dataset
    num_contacts = int(group["num_contacts"][()])
    results = ContactResults(config)
    for i in range(num_contacts):
        results.add_contact_info(ContactInfoData(group[f"contacts/{i}"]).to_contact_info())
    msg.info(f"Loaded {num_contacts} contacts from '{namespace or '/'}'")
    return results

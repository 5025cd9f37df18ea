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
Unit tests for `sim/contact_arrays.py`.

Covers the export of contact results to warp arrays, the reporting kernels,
and differentiation of contact quantities through a warp tape.
"""

import dataclasses
import unittest

import numpy as np
import warp as wp

from contactinfo._src.core.config import ContactResultsConfig
from contactinfo._src.core.types import BodyIndex, GeometryId, float32, float64
from contactinfo._src.geometry.query_results import PenetrationAsPointPair
from contactinfo._src.sim.contact_arrays import (
    ContactInfoArrays,
    compute_body_net_forces,
    compute_contact_force_norms,
)
from contactinfo._src.sim.contact_info import ContactInfo
from contactinfo._src.sim.contact_results import ContactResults
from contactinfo._src.utils import logger as msg
from contactinfo.tests import setup_tests, test_context

###
# Constants
###

CONTACT_STIFFNESS = 1.0e4
"""Penalty stiffness used to produce contact forces from penetration depths."""


###
# Kernels
###


@wp.kernel
def _eval_penalty_contact(
    # Inputs:
    ke: wp.float64,
    depth: wp.array(dtype=wp.float64),
    normal: wp.array(dtype=wp.vec3d),
    # Outputs:
    contact_force: wp.array(dtype=wp.vec3d),
):
    cid = wp.tid()
    # The force on B pushes it away from A, i.e. against the B-to-A normal
    contact_force[cid] = -ke * depth[cid] * normal[cid]


###
# Helper functions
###


def make_results():
    results = ContactResults()
    results.add_contact_info(
        ContactInfo(
            bodyA_id=BodyIndex(0),
            bodyB_id=BodyIndex(1),
            contact_force=(0.0, 0.0, 10.0),
            contact_point=(0.1, 0.0, 0.0),
            separation_speed=-0.02,
            slip_speed=0.0,
            point_pair=PenetrationAsPointPair(
                id_A=GeometryId(1),
                id_B=GeometryId(2),
                p_WCa=(0.1, 0.0, -0.001),
                p_WCb=(0.1, 0.0, 0.0),
                nhat_BA_W=(0.0, 0.0, -1.0),
                depth=0.001,
            ),
        )
    )
    results.add_contact_info(
        ContactInfo(
            bodyA_id=BodyIndex(2),
            bodyB_id=BodyIndex(1),
            contact_force=(3.0, 4.0, 0.0),
            contact_point=(0.5, 0.25, 0.0),
            separation_speed=0.01,
            slip_speed=0.3,
            point_pair=PenetrationAsPointPair(
                id_A=GeometryId(3),
                id_B=GeometryId(2),
                p_WCa=(0.5, 0.25, 0.0),
                p_WCb=(0.5, 0.25, 0.002),
                nhat_BA_W=(1.0, 0.0, 0.0),
                depth=0.002,
            ),
        )
    )
    return results


###
# Tests
###


class TestSimContactArrays(unittest.TestCase):
    def setUp(self):
        if not test_context.setup_done:
            setup_tests()
        self.default_device = wp.get_device(test_context.device)
        self.verbose = test_context.verbose

        if self.verbose:
            msg.set_log_level(msg.LogLevel.DEBUG)
        else:
            msg.reset_log_level()

    def tearDown(self):
        self.default_device = None
        if self.verbose:
            msg.reset_log_level()

    def test_01_default_allocation(self):
        arrays = ContactInfoArrays(capacity=4, device=self.default_device)
        self.assertEqual(arrays.capacity, 4)
        self.assertEqual(arrays.num_contacts, 0)
        self.assertIs(arrays.dtype, float32)
        self.assertEqual(arrays.contact_force.dtype, wp.vec3f)
        self.assertEqual(arrays.slip_speed.dtype, wp.float32)
        self.assertEqual(arrays.device, self.default_device)
        np.testing.assert_array_equal(arrays.bodyA_id.numpy(), [-1, -1, -1, -1])
        np.testing.assert_array_equal(arrays.depth.numpy(), np.zeros(4))

    def test_02_invalid_allocation(self):
        with self.assertRaises(ValueError):
            ContactInfoArrays(capacity=-1, device=self.default_device)
        with self.assertRaises(TypeError):
            ContactInfoArrays(capacity=1, dtype=wp.int32, device=self.default_device)

    def test_03_export_and_import(self):
        results = make_results()
        config = ContactResultsConfig(dtype=float64, device=self.default_device)
        arrays = results.to_arrays(config)
        if self.verbose:
            print(f"contact_force:\n{arrays.contact_force}\n")

        self.assertEqual(arrays.num_contacts, 2)
        self.assertEqual(arrays.contact_force.dtype, wp.vec3d)
        np.testing.assert_array_equal(arrays.bodyA_id.numpy(), [0, 2])
        np.testing.assert_array_equal(arrays.id_B.numpy(), [2, 2])
        np.testing.assert_array_equal(arrays.contact_force.numpy()[0], [0.0, 0.0, 10.0])
        np.testing.assert_array_equal(arrays.separation_speed.numpy(), [-0.02, 0.01])

        restored = ContactResults.from_arrays(arrays)
        self.assertEqual(len(restored), len(results))
        for original, loaded in zip(results, restored, strict=True):
            self.assertEqual(loaded, original)

    def test_04_export_empty_results(self):
        arrays = ContactResults().to_arrays(ContactResultsConfig(device=self.default_device))
        self.assertEqual(arrays.num_contacts, 0)
        self.assertEqual(len(ContactResults.from_arrays(arrays)), 0)
        self.assertEqual(len(compute_contact_force_norms(arrays)), 0)

    def test_05_assign_over_capacity(self):
        arrays = ContactInfoArrays(capacity=1, device=self.default_device)
        with self.assertRaises(ValueError):
            arrays.assign(list(make_results()))

    def test_06_zero(self):
        arrays = make_results().to_arrays(ContactResultsConfig(device=self.default_device))
        arrays.zero()
        self.assertEqual(arrays.num_contacts, 0)
        np.testing.assert_array_equal(arrays.bodyB_id.numpy(), [-1, -1])
        np.testing.assert_array_equal(arrays.contact_force.numpy(), np.zeros((2, 3)))

    def test_07_contact_force_norms(self):
        for dtype in (float32, float64):
            arrays = make_results().to_arrays(ContactResultsConfig(dtype=dtype, device=self.default_device))
            norms = compute_contact_force_norms(arrays)
            self.assertEqual(norms.dtype, dtype)
            np.testing.assert_allclose(norms.numpy(), [10.0, 5.0], rtol=1e-6)

    def test_08_body_net_forces(self):
        results = make_results()
        arrays = results.to_arrays(ContactResultsConfig(dtype=float64, device=self.default_device))
        body_forces = compute_body_net_forces(arrays, num_bodies=3)
        for body in range(3):
            np.testing.assert_allclose(body_forces.numpy()[body], results.net_force_on_body(body), atol=1e-12)

        with self.assertRaises(ValueError):
            compute_body_net_forces(arrays, num_bodies=2)

    def test_09_differentiable_contact_force(self):
        depth_0 = 0.001
        arrays = ContactInfoArrays(capacity=1, dtype=float64, requires_grad=True, device=self.default_device)
        arrays.num_contacts = 1
        arrays.bodyA_id.assign([0])
        arrays.bodyB_id.assign([1])
        arrays.id_A.assign([1])
        arrays.id_B.assign([2])
        arrays.nhat_BA_W.assign(np.array([[0.0, 0.0, -1.0]]))
        arrays.depth.assign([depth_0])
        norms = wp.zeros(1, dtype=wp.float64, requires_grad=True, device=self.default_device)

        def forward():
            wp.launch(
                _eval_penalty_contact,
                dim=1,
                inputs=[wp.float64(CONTACT_STIFFNESS), arrays.depth, arrays.nhat_BA_W],
                outputs=[arrays.contact_force],
                device=self.default_device,
            )
            compute_contact_force_norms(arrays, norms)
            return norms

        # Analytic derivative of the force magnitude w.r.t. the penetration depth
        tape = wp.Tape()
        with tape:
            forward()
        tape.backward(grads={norms: wp.ones(1, dtype=wp.float64, device=self.default_device)})
        grad_analytic = arrays.depth.grad.numpy()[0]
        tape.zero()

        # Values match the evaluation with plain floats
        info = ContactResults.from_arrays(arrays)[0]
        self.assertEqual(info.contact_force, (0.0, 0.0, CONTACT_STIFFNESS * depth_0))
        self.assertAlmostEqual(float(norms.numpy()[0]), CONTACT_STIFFNESS * depth_0, places=12)
        self.assertEqual(info.point_pair.depth, depth_0)

        # Central finite differences
        eps = 1.0e-6
        arrays.depth.assign([depth_0 + eps])
        norm_1 = forward().numpy()[0]
        arrays.depth.assign([depth_0 - eps])
        norm_0 = forward().numpy()[0]
        arrays.depth.assign([depth_0])
        grad_numeric = (norm_1 - norm_0) / (2.0 * eps)

        if self.verbose:
            print(f"numeric grad: {grad_numeric}")
            print(f"analytic grad: {grad_analytic}")

        self.assertAlmostEqual(grad_analytic, CONTACT_STIFFNESS, places=6)
        self.assertLess(abs(grad_analytic - grad_numeric) / abs(grad_numeric), 1.0e-6)

    def test_10_fresh_arrays_hold_no_contacts(self):
        arrays = ContactInfoArrays(capacity=2, dtype=float64, device=self.default_device)
        self.assertEqual(len(ContactResults.from_arrays(arrays)), 0)
        self.assertEqual(len(compute_contact_force_norms(arrays)), 0)
        body_forces = compute_body_net_forces(arrays, num_bodies=2)
        np.testing.assert_array_equal(body_forces.numpy(), np.zeros((2, 3)))

    def test_11_index_out_of_int32_range(self):
        info = make_results()[0]
        arrays = ContactInfoArrays(capacity=1, device=self.default_device)

        largest = dataclasses.replace(info, bodyB_id=BodyIndex(2**31 - 1))
        arrays.assign([largest])
        self.assertEqual(arrays.bodyB_id.numpy()[0], 2**31 - 1)

        arrays.zero()
        with self.assertRaises(ValueError):
            arrays.assign([dataclasses.replace(info, bodyB_id=BodyIndex(2**31))])
        point_pair = dataclasses.replace(info.point_pair, id_A=GeometryId(2**31))
        with self.assertRaises(ValueError):
            arrays.assign([dataclasses.replace(info, point_pair=point_pair)])
        self.assertEqual(arrays.num_contacts, 0)


###
# Test execution
###

if __name__ == "__main__":
    setup_tests()
    unittest.main(verbosity=2)

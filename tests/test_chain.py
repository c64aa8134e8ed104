import logging

import numpy as np
import pytest

from ik_solver.model.chain import (
    DH_TEMPLATE,
    JointChain,
    chain_for_dof,
    forward_kinematics,
    joint_frames,
    joint_transform,
)

RX_90 = np.array([[1.0, 0.0, 0.0], [0.0, 0.0, -1.0], [0.0, 1.0, 0.0]])


def test_chain_for_dof_takes_template_prefix():
    for dof in range(2, 8):
        chain = chain_for_dof(dof)
        assert len(chain) == dof
        assert list(chain) == list(DH_TEMPLATE[:dof])


@pytest.mark.parametrize("dof", [0, 1, 8])
def test_chain_for_dof_rejects_unsupported_dof(dof):
    with pytest.raises(ValueError):
        chain_for_dof(dof)


def test_joint_chain_index_out_of_range_raises():
    chain = chain_for_dof(3)
    assert chain[2] == DH_TEMPLATE[2]
    with pytest.raises(IndexError):
        chain[3]


def test_joint_chain_requires_four_parameters():
    with pytest.raises(ValueError):
        JointChain([[0.0, 0.3, 0.0]])


def test_joint_chain_from_rows_equals_template_chain():
    rows = chain_for_dof(4).as_list()
    assert JointChain(rows) == chain_for_dof(4)
    assert hash(JointChain(rows)) == hash(chain_for_dof(4))


def test_joint_transform_is_homogeneous():
    t = joint_transform(0.7, 0.3, 0.3, np.pi / 2)
    np.testing.assert_allclose(t[3], [0.0, 0.0, 0.0, 1.0])
    rot = t[:3, :3]
    np.testing.assert_allclose(rot @ rot.T, np.identity(3), atol=1e-12)
    np.testing.assert_allclose(t[:3, 3], [0.3 * np.cos(0.7), 0.3 * np.sin(0.7), 0.3])


def test_zero_pose_2dof():
    pos, rot = forward_kinematics(np.zeros(2), chain_for_dof(2))
    np.testing.assert_allclose(pos, [0.3, 0.0, 0.3], atol=1e-12)
    np.testing.assert_allclose(rot, RX_90, atol=1e-12)


def test_zero_pose_7dof():
    pos, rot = forward_kinematics(np.zeros(7), chain_for_dof(7))
    np.testing.assert_allclose(pos, [1.2, -0.3, 0.0], atol=1e-12)
    np.testing.assert_allclose(rot, RX_90, atol=1e-12)


def test_2dof_position_closed_form():
    q1, q2 = 0.4, 0.7
    pos, _ = forward_kinematics([q1, q2], chain_for_dof(2))
    expected = [
        0.3 * np.cos(q1) * np.cos(q2),
        0.3 * np.sin(q1) * np.cos(q2),
        0.3 + 0.3 * np.sin(q2),
    ]
    np.testing.assert_allclose(pos, expected, atol=1e-12)


def test_theta_offset_is_added_to_joint_angle():
    shifted = JointChain([[0.5, 0.3, 0.0, np.pi / 2], [0.0, 0.0, 0.3, 0.0]])
    pos_a, rot_a = forward_kinematics([0.0, 0.2], shifted)
    pos_b, rot_b = forward_kinematics([0.5, 0.2], chain_for_dof(2))
    np.testing.assert_allclose(pos_a, pos_b, atol=1e-12)
    np.testing.assert_allclose(rot_a, rot_b, atol=1e-12)


def test_forward_kinematics_is_deterministic():
    q = np.array([0.1, -0.2, 0.3, 0.4, -0.5, 0.6, -0.7])
    chain = chain_for_dof(7)
    pos_a, rot_a = forward_kinematics(q, chain)
    pos_b, rot_b = forward_kinematics(q, chain)
    assert np.array_equal(pos_a, pos_b)
    assert np.array_equal(rot_a, rot_b)


def test_forward_kinematics_returns_orthonormal_rotation():
    rng = np.random.default_rng(3)
    chain = chain_for_dof(6)
    for _ in range(10):
        _, rot = forward_kinematics(rng.uniform(-np.pi, np.pi, 6), chain)
        np.testing.assert_allclose(rot @ rot.T, np.identity(3), atol=1e-10)
        assert np.linalg.det(rot) == pytest.approx(1.0)


def test_length_mismatch_uses_shared_prefix_and_warns(caplog):
    chain = chain_for_dof(2)
    expected = forward_kinematics([0.3, 0.4], chain)
    with caplog.at_level(logging.WARNING, logger="ik_solver.model.chain"):
        pos, rot = forward_kinematics([0.3, 0.4, 1.0], chain)
    np.testing.assert_allclose(pos, expected[0])
    np.testing.assert_allclose(rot, expected[1])
    assert any("does not match" in r.getMessage() for r in caplog.records)


def test_joint_frames_include_base_and_end_effector():
    q = [0.2, -0.4, 0.6]
    chain = chain_for_dof(3)
    frames = joint_frames(q, chain)
    assert len(frames) == 4
    np.testing.assert_array_equal(frames[0][0], np.zeros(3))
    np.testing.assert_array_equal(frames[0][1], np.identity(3))
    end_pos, end_rot = forward_kinematics(q, chain)
    np.testing.assert_allclose(frames[-1][0], end_pos)
    np.testing.assert_allclose(frames[-1][1], end_rot)
    # 第一个关节只沿 z 平移 d = 0.3
    np.testing.assert_allclose(frames[1][0], [0.0, 0.0, 0.3], atol=1e-12)


if __name__ == "__main__":
    pytest.main([__file__])

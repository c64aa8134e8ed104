import logging

import numpy as np
import pytest

from ik_solver.model.chain import chain_for_dof, forward_kinematics
from ik_solver.model.workspace import bounds, is_reachable
from ik_solver.solver.solve_ik import ACCEPTANCE_THRESHOLD, IKResult, solve_ik

FAST = dict(max_iterations=300, tolerance=1e-3, damping=0.05, orientation_weight=0.8)


def _reachable_configuration(dof, seed=0):
    """随机关节角，且末端落在该自由度的工作空间包围盒内"""
    rng = np.random.default_rng(seed)
    chain = chain_for_dof(dof)
    for _ in range(1000):
        q = rng.uniform(-1.0, 1.0, dof)
        pos, rot = forward_kinematics(q, chain)
        if is_reachable(pos, dof):
            return q, pos, rot
    raise AssertionError(f"no reachable configuration found for DOF {dof}")


# ---------------------------------------------------------------------------
# 前置条件
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("dof", [2, 3, 4, 5, 6, 7])
def test_target_outside_workspace_is_rejected(dof):
    result = solve_ik([100.0, 100.0, 100.0], np.identity(3), dof=dof)
    assert result.success is False
    assert result.joint_angles is None
    assert result.iterations == 0


@pytest.mark.parametrize("dof", [2, 7])
def test_target_just_below_workspace_is_rejected(dof):
    box = bounds(dof)
    result = solve_ik([0.0, 0.0, box.z_min - 0.01], np.identity(3), dof=dof)
    assert result.joint_angles is None
    assert result.iterations == 0


def test_invalid_target_shapes_are_rejected():
    for position, rotation in [
        ([0.1, 0.2], np.identity(3)),
        ([0.1, 0.2, 0.5], np.identity(4)),
        (None, np.identity(3)),
        ([0.1, 0.2, 0.5], None),
    ]:
        result = solve_ik(position, rotation, dof=2)
        assert result == IKResult(None, False)


def test_unknown_dof_is_rejected():
    result = solve_ik([0.0, 0.0, 0.5], np.identity(3), dof=9)
    assert result.joint_angles is None
    assert result.success is False


def test_empty_chain_is_rejected():
    result = solve_ik([0.0, 0.0, 0.5], np.identity(3), dof=2, chain=[])
    assert result.joint_angles is None
    assert result.iterations == 0


@pytest.mark.parametrize("chain", [
    [[0.0, 0.3, 0.0], [0.0, 0.0, 0.3, 0.0]],
    [[0.0, 0.3, 0.0, 'x'], [0.0, 0.0, 0.3, 0.0]],
    [None, [0.0, 0.0, 0.3, 0.0]],
])
def test_malformed_chain_returns_unsolved_result(chain, caplog):
    with caplog.at_level(logging.ERROR, logger="ik_solver.solver.solve_ik"):
        result = solve_ik([0.0, 0.0, 0.5], np.identity(3), dof=2, chain=chain)
    assert result == IKResult(None, False)
    assert any("Invalid DH chain" in r.getMessage() for r in caplog.records)


@pytest.mark.parametrize("guess", [['a', 'b'], object(), [[0.1, 0.2], [0.3]]])
def test_non_numeric_initial_guess_returns_unsolved_result(guess):
    result = solve_ik([0.0, 0.0, 0.5], np.identity(3), initial_guess=guess, dof=2)
    assert result == IKResult(None, False)


# ---------------------------------------------------------------------------
# IKResult
# ---------------------------------------------------------------------------

def test_results_with_joint_angles_compare_by_value():
    first = IKResult(np.array([0.1, 0.2]), True, 1e-4, 5)
    assert first == IKResult(np.array([0.1, 0.2]), True, 1e-4, 5)
    assert first != IKResult(np.array([0.1, 0.3]), True, 1e-4, 5)
    assert first != IKResult(None, True, 1e-4, 5)
    assert first != IKResult(np.array([0.1, 0.2, 0.0]), True, 1e-4, 5)
    assert IKResult(None, False) == IKResult(None, False)


# ---------------------------------------------------------------------------
# 求解
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("dof", [2, 3, 4, 5, 6, 7])
def test_round_trip_from_nearby_guess(dof):
    q_true, target_pos, target_rot = _reachable_configuration(dof, seed=dof)
    result = solve_ik(target_pos, target_rot, initial_guess=q_true + 0.05, dof=dof, **FAST)

    assert result.success
    assert result.joint_angles.shape == (dof,)
    assert result.error < 1e-3
    pos, _ = forward_kinematics(result.joint_angles, chain_for_dof(dof))
    assert np.linalg.norm(pos - target_pos) < 1e-3


def test_2dof_scenario_from_zero():
    chain = chain_for_dof(2)
    target_pos, target_rot = forward_kinematics([0.4, 0.7], chain)
    result = solve_ik(target_pos, target_rot, initial_guess=[0.0, 0.0], dof=2, **FAST)

    assert result.success
    assert 0 < result.iterations < 300
    pos, _ = forward_kinematics(result.joint_angles, chain)
    assert np.linalg.norm(pos - target_pos) < 1e-3


def test_box_accepts_pose_the_2dof_arm_cannot_reach():
    # 位于包围盒内，但离 (0, 0, 0.3) 超过 0.3，最优位置误差大于 0.12
    target = [0.3, 0.0, 0.6]
    assert is_reachable(target, 2)
    result = solve_ik(target, np.identity(3), initial_guess=[0.0, 0.0], dof=2, **FAST)

    assert result.success is False
    assert result.joint_angles is not None
    assert result.iterations == 300
    assert result.error > ACCEPTANCE_THRESHOLD


def test_best_effort_result_below_threshold_is_success():
    chain = chain_for_dof(2)
    q_true = np.array([0.4, 0.7])
    target_pos, target_rot = forward_kinematics(q_true, chain)
    guess = q_true + 0.01

    result = solve_ik(target_pos, target_rot, initial_guess=guess, max_iterations=1,
                      tolerance=1e-12, dof=2)

    assert result.iterations == 1
    assert result.success
    assert result.error < ACCEPTANCE_THRESHOLD
    # 只评估过初值，最优解就是初值
    np.testing.assert_allclose(result.joint_angles, guess)


def test_best_effort_result_above_threshold_fails():
    chain = chain_for_dof(2)
    q_true = np.array([0.4, 0.7])
    target_pos, target_rot = forward_kinematics(q_true, chain)

    result = solve_ik(target_pos, target_rot, initial_guess=q_true + 1.0, max_iterations=1, dof=2)

    assert result.success is False
    assert result.joint_angles is not None
    assert result.error > ACCEPTANCE_THRESHOLD


def test_initial_guess_handling():
    target_pos, target_rot = forward_kinematics([0.4, 0.7], chain_for_dof(2))

    short = solve_ik(target_pos, target_rot, initial_guess=[0.5], max_iterations=1, dof=2)
    np.testing.assert_array_equal(short.joint_angles, np.zeros(2))

    long = solve_ik(target_pos, target_rot, initial_guess=[0.1, 0.2, 0.3], max_iterations=1, dof=2)
    np.testing.assert_array_equal(long.joint_angles, [0.1, 0.2])


def test_inputs_are_not_mutated():
    target_pos, target_rot = forward_kinematics([0.4, 0.7], chain_for_dof(2))
    guess = np.array([0.1, 0.1])
    pos_before, rot_before = target_pos.copy(), target_rot.copy()

    solve_ik(target_pos, target_rot, initial_guess=guess, dof=2, **FAST)

    np.testing.assert_array_equal(guess, [0.1, 0.1])
    np.testing.assert_array_equal(target_pos, pos_before)
    np.testing.assert_array_equal(target_rot, rot_before)


def test_chain_longer_than_dof_solves_prefix(caplog):
    target_pos, target_rot = forward_kinematics([0.4, 0.7], chain_for_dof(2))
    with caplog.at_level(logging.WARNING, logger="ik_solver.solver.solve_ik"):
        result = solve_ik(target_pos, target_rot, initial_guess=[0.0, 0.0], dof=2,
                          chain=chain_for_dof(3), **FAST)
    assert result.joint_angles.shape == (2,)
    assert result.success
    assert any("solving the first 2 joints" in r.getMessage() for r in caplog.records)


def test_each_call_returns_new_result():
    target_pos, target_rot = forward_kinematics([0.4, 0.7], chain_for_dof(2))
    first = solve_ik(target_pos, target_rot, initial_guess=[0.4, 0.7], dof=2)
    second = solve_ik(target_pos, target_rot, initial_guess=[0.4, 0.7], dof=2)
    assert first is not second
    assert first.joint_angles is not second.joint_angles


if __name__ == "__main__":
    pytest.main([__file__])

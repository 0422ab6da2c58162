import logging
import math

import numpy as np
import pytest

from chain_ik import (
    Chain,
    ChainSolver,
    ContinuityLengthMismatchError,
    DegenerateVectorError,
    InfeasibleSubchainError,
    InvalidChainError,
    SolverConfig,
    joint_positions,
    segment_angles,
    solve,
)

CHAIN = [30.0, 20.0, 30.0, 20.0, 20.0, 30.0]
H = math.sqrt(75.0)


def _magnitudes(offsets):
    return np.hypot(offsets[:, 0], offsets[:, 1])


def _assert_lengths_kept(offsets, chain, tol=1e-3):
    assert np.allclose(_magnitudes(offsets), chain, atol=tol)


# ---------------------------------------------------------------------------
# Chain configuration
# ---------------------------------------------------------------------------

def test_chain_reach_and_len():
    chain = Chain.from_lengths(CHAIN)
    assert len(chain) == 6
    assert chain.reach == pytest.approx(150.0)
    assert chain.zero_offsets().shape == (6, 2)


@pytest.mark.parametrize("lengths", [[], [10.0, 0.0], [5.0, -1.0], [float("nan")]])
def test_invalid_chain_is_rejected(lengths):
    with pytest.raises(InvalidChainError):
        Chain.from_lengths(lengths)
    with pytest.raises(ValueError):
        ChainSolver(lengths)


def test_continuity_hint_length_mismatch():
    solver = ChainSolver(CHAIN)
    with pytest.raises(ContinuityLengthMismatchError):
        solver.solve((10.0, 0.0), [(0.0, 0.0)] * 5)
    with pytest.raises(ContinuityLengthMismatchError):
        solver.solve((10.0, 0.0), [])


def test_continuity_hint_must_hold_2d_vectors():
    solver = ChainSolver([10.0, 10.0])
    with pytest.raises(ValueError):
        solver.solve((10.0, 0.0), [1.0, 2.0])


# ---------------------------------------------------------------------------
# Reachable and unreachable targets
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("lengths", [[10.0], [5.0, 5.0], CHAIN])
def test_output_has_one_offset_per_segment(lengths):
    offsets = ChainSolver(lengths).solve((3.0, 4.0)).offsets
    assert offsets.shape == (len(lengths), 2)


def test_reference_chain_reaches_target():
    sol = ChainSolver(CHAIN).solve((100.0, 0.0), np.zeros((6, 2)))
    assert not sol.clamped
    assert sol.ok
    assert np.allclose(sol.tip, [100.0, 0.0], atol=1e-6)
    _assert_lengths_kept(sol.offsets, CHAIN)


def test_reference_chain_clamps_unreachable_target():
    sol = ChainSolver(CHAIN).solve((300.0, 0.0))
    assert sol.clamped
    assert np.allclose(sol.target, [150.0, 0.0])
    assert np.allclose(sol.tip, [150.0, 0.0], atol=1e-6)
    _assert_lengths_kept(sol.offsets, CHAIN)


@pytest.mark.parametrize("angle", np.linspace(0.0, 2 * math.pi, 9)[:-1])
@pytest.mark.parametrize("radius", [100.0, 220.0])
def test_tip_and_lengths_in_every_direction(angle, radius):
    target = (radius * math.cos(angle), radius * math.sin(angle))
    sol = ChainSolver(CHAIN).solve(target)
    expected = np.array(target) * min(1.0, 150.0 / radius)
    assert np.allclose(sol.tip, expected, atol=1e-6)
    _assert_lengths_kept(sol.offsets, CHAIN)


def test_unreachable_tip_points_along_target():
    sol = ChainSolver(CHAIN).solve((-300.0, 400.0))
    assert np.linalg.norm(sol.tip) == pytest.approx(150.0)
    assert np.allclose(sol.tip / 150.0, [-0.6, 0.8])


@pytest.mark.parametrize("radius", [60.0, 100.0, 150.0])
def test_strict_mode_solves_regular_targets(radius):
    solver = ChainSolver(CHAIN, SolverConfig(strict=True))
    sol = solver.solve((0.0, radius))
    assert sol.ok
    assert np.allclose(sol.tip, [0.0, radius], atol=1e-6)
    _assert_lengths_kept(sol.offsets, CHAIN, tol=1e-6)


def test_solve_is_deterministic():
    solver = ChainSolver(CHAIN)
    hint = solver.solve((80.0, 40.0)).offsets
    a = solver.solve((90.0, 30.0), hint, (0.0, -50.0))
    b = solver.solve((90.0, 30.0), hint.copy(), (0.0, -50.0))
    assert np.array_equal(a.offsets, b.offsets)


def test_solve_does_not_mutate_hint():
    hint = np.ones((6, 2))
    ChainSolver(CHAIN).solve((100.0, 0.0), hint)
    assert np.array_equal(hint, np.ones((6, 2)))


def test_single_segment_points_at_target():
    sol = ChainSolver([10.0]).solve((0.0, 25.0))
    assert np.allclose(sol.offsets, [[0.0, 10.0]])
    assert sol.ok


# ---------------------------------------------------------------------------
# Candidate selection
# ---------------------------------------------------------------------------

def test_continuity_hint_picks_nearer_candidate():
    solver = ChainSolver([10.0, 10.0])
    below = solver.solve((10.0, 0.0), [(5.0, -8.0), (0.0, 0.0)])
    above = solver.solve((10.0, 0.0), [(5.0, 8.0), (0.0, 0.0)])
    assert np.allclose(below.offsets, [[5.0, -H], [5.0, H]])
    assert np.allclose(above.offsets, [[5.0, H], [5.0, -H]])


def test_exact_tie_goes_to_second_candidate():
    sol = ChainSolver([10.0, 10.0]).solve((10.0, 0.0))
    joint = sol.diagnostics.joints[0]
    assert joint.tie
    assert joint.chosen == 1
    assert np.allclose(sol.offsets[0], [5.0, H])


@pytest.mark.parametrize(
    "offset, epsilon, expected_y",
    [
        (0.2, 0.0, -H),
        (0.2, 0.5, H),
        (0.3, 0.5, -H),
    ],
)
def test_tie_epsilon_boundary(offset, epsilon, expected_y):
    # distances to the candidates differ by 2 * offset
    solver = ChainSolver([10.0, 10.0], SolverConfig(tie_epsilon=epsilon))
    sol = solver.solve((10.0, 0.0), [(5.0, -offset), (0.0, 0.0)])
    assert np.allclose(sol.offsets[0], [5.0, expected_y])


def test_pole_is_ignored_by_default():
    solver = ChainSolver([10.0, 10.0])
    sol = solver.solve((10.0, 0.0), pole=(0.0, -5.0))
    assert np.allclose(sol.offsets[0], [5.0, H])


def test_pole_side_mode_bends_toward_pole():
    solver = ChainSolver([10.0, 10.0], SolverConfig(pole_mode="side"))
    down = solver.solve((10.0, 0.0), pole=(0.0, -5.0))
    up = solver.solve((10.0, 0.0), [(5.0, -8.0), (0.0, 0.0)], pole=(0.0, 5.0))
    assert np.allclose(down.offsets[0], [5.0, -H])
    assert np.allclose(up.offsets[0], [5.0, H])


def test_pole_on_target_axis_falls_back_to_continuity():
    solver = ChainSolver([10.0, 10.0], SolverConfig(pole_mode="side"))
    sol = solver.solve((10.0, 0.0), [(5.0, -8.0), (0.0, 0.0)], pole=(20.0, 0.0))
    assert np.allclose(sol.offsets[0], [5.0, -H])


# ---------------------------------------------------------------------------
# Degenerate geometry
# ---------------------------------------------------------------------------

def test_infeasible_subchain_is_absorbed_when_lenient():
    sol = ChainSolver([10.0, 30.0]).solve((1.0, 0.0))
    assert sol.diagnostics.infeasible
    joint = sol.diagnostics.joints[0]
    assert joint.index == 1
    assert joint.effective_length == 0.0
    assert not sol.ok
    assert np.allclose(sol.tip, [1.0, 0.0])


def test_infeasible_subchain_raises_when_strict():
    solver = ChainSolver([10.0, 30.0], SolverConfig(strict=True))
    with pytest.raises(InfeasibleSubchainError):
        solver.solve((1.0, 0.0))


def test_dead_zone_target_is_reported():
    sol = ChainSolver([100.0, 10.0]).solve((5.0, 0.0))
    assert not sol.ok
    assert sol.diagnostics.max_length_error > 1.0
    assert np.allclose(sol.tip, [5.0, 0.0])
    with pytest.raises(InfeasibleSubchainError):
        ChainSolver([100.0, 10.0], SolverConfig(strict=True)).solve((5.0, 0.0))


def test_target_at_base_bends_along_x_axis():
    sol = ChainSolver([10.0, 10.0]).solve((0.0, 0.0))
    assert sol.diagnostics.degenerate
    assert not sol.ok
    assert np.allclose(sol.offsets, [[0.0, -10.0], [0.0, 10.0]])
    with pytest.raises(DegenerateVectorError):
        ChainSolver([10.0, 10.0], SolverConfig(strict=True)).solve((0.0, 0.0))


def test_solve_or_none():
    solver = ChainSolver([100.0, 10.0])
    assert solver.solve_or_none((5.0, 0.0)) is None
    assert solver.solve_or_none((105.0, 0.0)) is not None


# ---------------------------------------------------------------------------
# Functional API and helpers
# ---------------------------------------------------------------------------

def test_module_level_solve_matches_solver():
    offsets = solve(CHAIN, np.zeros((6, 2)), (100.0, 0.0), 150.0, (0.0, 0.0))
    expected = ChainSolver(CHAIN).solve((100.0, 0.0)).offsets
    assert isinstance(offsets, np.ndarray)
    assert np.array_equal(offsets, expected)


def test_module_level_solve_warns_on_reach_mismatch(caplog):
    with caplog.at_level(logging.WARNING, logger="chain_ik.ik_solver"):
        offsets = solve(CHAIN, None, (300.0, 0.0), 100.0)
    assert "differs" in caplog.text
    assert np.allclose(offsets.sum(axis=0), [100.0, 0.0])


def test_joints_are_logged_at_debug(caplog):
    with caplog.at_level(logging.DEBUG, logger="chain_ik.ik_solver"):
        ChainSolver(CHAIN).solve((100.0, 0.0))
    assert "joint 5" in caplog.text
    assert "joint 1" in caplog.text


def test_solve_sequence_threads_previous_pose():
    solver = ChainSolver(CHAIN)
    targets = [(100.0, 0.0), (95.0, 20.0), (90.0, 40.0)]
    sols = solver.solve_sequence(targets)
    hint = None
    for t, sol in zip(targets, sols):
        manual = solver.solve(t, hint)
        assert np.array_equal(manual.offsets, sol.offsets)
        hint = manual.offsets


def test_joint_positions_and_angles():
    offsets = [(1.0, 0.0), (0.0, 2.0)]
    positions = joint_positions(offsets, base=(10.0, 10.0))
    assert np.allclose(positions, [[10.0, 10.0], [11.0, 10.0], [11.0, 12.0]])
    assert np.allclose(segment_angles(offsets), [0.0, math.pi / 2])


def test_solution_joint_positions_end_at_tip():
    sol = ChainSolver(CHAIN).solve((60.0, 80.0))
    positions = sol.joint_positions()
    assert positions.shape == (7, 2)
    assert np.allclose(positions[0], [0.0, 0.0])
    assert np.allclose(positions[-1], [60.0, 80.0], atol=1e-6)

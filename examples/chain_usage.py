"""Example usage of the chain IK solver without any GUI.
Run: python examples/chain_usage.py
"""
import logging

from chain_ik import ChainSolver, PathPlanner, SolverConfig

logging.basicConfig(level=logging.INFO)

# Segment lengths from the base outward (replace with your rig)
CHAIN = [30.0, 20.0, 30.0, 20.0, 20.0, 30.0]

solver = ChainSolver(CHAIN, SolverConfig(side_step=0.5))

# Sample targets in chain-local coordinates (base at the origin, +y up)
targets = [
    (100.0, 0.0),   # inside reach
    (60.0, 80.0),   # up and right
    (300.0, 0.0),   # beyond reach, clamped to 150
]

pose = None
for t in targets:
    sol = solver.solve(t, pose)
    pose = sol.offsets
    tip = sol.tip
    status = "clamped" if sol.clamped else ("ok" if sol.ok else "approximate")
    print(f"Target {t}: tip=({tip[0]:.2f}, {tip[1]:.2f}) [{status}]")
    for i, (dx, dy) in enumerate(pose):
        print(f"  segment {i}: ({dx:7.2f}, {dy:7.2f})")

planner = PathPlanner(solver, max_segment_length=10.0, linear_speed=50.0)
for seg in planner.plan((100.0, 0.0), (0.0, 100.0), pose):
    speeds = ", ".join(f"{v:+.2f}" for v in seg.velocities)
    print(f"Sub-segment {seg.index}: {seg.duration:.2f}s  rad/s=[{speeds}]")

"""Interactive visualization demo for the chain IK solver.

This script uses pygame to:
  - Move the target with the left mouse button held down.
  - Move the pole with the right mouse button.
  - Draw the chain, its joints and the reach circle of every segment.

Prerequisites:
    pip install -e .[vis]

Run from project root:
    python examples/chain_with_vis.py

Close the window or press ESC to exit. Press P to toggle pole-side bending.

NOTE: This file is for debugging / demonstration only and is optional.
"""
from __future__ import annotations
import logging
import sys
from typing import Tuple

try:
    import pygame  # type: ignore
except ImportError:  # pragma: no cover
    print("pygame not installed. Install with: pip install pygame")
    sys.exit(1)

from chain_ik import ChainSolver, SolverConfig, joint_positions

Color = Tuple[int, int, int]

# ---------------- Configuration (edit as needed) ----------------
WIDTH, HEIGHT = 960, 540
CHAIN = [30.0, 20.0, 30.0, 20.0, 20.0, 30.0]
SIDE_STEP = 0.5
BG_COLOR: Color = (255, 215, 0)
CHAIN_COLOR: Color = (255, 255, 255)
JOINT_COLOR: Color = (55, 59, 68)
REACH_COLOR: Color = (255, 0, 0)
TARGET_COLOR: Color = (15, 153, 113)
POLE_COLOR: Color = (0, 242, 255)
TEXT_COLOR: Color = (30, 30, 30)
FPS = 60

SCREEN_ORIGIN_X = WIDTH * 0.5   # Screen pixel where the chain base is drawn
SCREEN_ORIGIN_Y = HEIGHT * 0.5


def chain_to_screen(p):
    # Chain space is +y up, screen space is +y down
    return (int(SCREEN_ORIGIN_X + p[0]), int(SCREEN_ORIGIN_Y - p[1]))


def screen_to_chain(px, py):
    return (float(px - SCREEN_ORIGIN_X), float(SCREEN_ORIGIN_Y - py))


def make_solver(pole_mode: str) -> ChainSolver:
    return ChainSolver(CHAIN, SolverConfig(side_step=SIDE_STEP, pole_mode=pole_mode))


# ---------------- Main loop ----------------

def main() -> None:
    logging.basicConfig(level=logging.INFO)
    pygame.init()
    pygame.display.set_caption("Chain IK Visual Demo")
    screen = pygame.display.set_mode((WIDTH, HEIGHT))
    clock = pygame.time.Clock()
    font = pygame.font.SysFont(None, 18)

    pole_mode = "ignore"
    solver = make_solver(pole_mode)
    pose = solver.chain.zero_offsets()
    target = (0.0, 0.0)
    pole = (0.0, 0.0)
    status = "click to set a target"

    running = True
    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                running = False
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_p:
                pole_mode = "side" if pole_mode == "ignore" else "ignore"
                solver = make_solver(pole_mode)

        left, _, right = pygame.mouse.get_pressed()
        if left:
            target = screen_to_chain(*pygame.mouse.get_pos())
            solution = solver.solve(target, pose, pole)
            pose = solution.offsets
            if solution.clamped:
                status = "clamped to reach"
            elif solution.ok:
                status = "OK"
            else:
                status = solution.diagnostics.warnings[0]
        if right:
            pole = screen_to_chain(*pygame.mouse.get_pos())

        screen.fill(BG_COLOR)

        pygame.draw.circle(screen, POLE_COLOR, chain_to_screen(pole), 5)
        pygame.draw.circle(screen, TARGET_COLOR, chain_to_screen(target), 5)

        points = [chain_to_screen(p) for p in joint_positions(pose)]
        for p0, p1 in zip(points[:-1], points[1:]):
            pygame.draw.line(screen, CHAIN_COLOR, p0, p1, 7)
        for p in points:
            pygame.draw.circle(screen, JOINT_COLOR, p, 5)
        for p, r in zip(points[1:], CHAIN):
            pygame.draw.circle(screen, REACH_COLOR, p, int(r), 1)

        label = f"{status}  |  pole mode: {pole_mode} (P)"
        screen.blit(font.render(label, True, TEXT_COLOR), (10, 10))

        pygame.display.flip()
        clock.tick(FPS)

    pygame.quit()


if __name__ == "__main__":
    main()

from __future__ import annotations

import argparse
import logging

import gymnasium as gym

import falling_block_rl.env  # noqa: F401
from falling_block_rl.env.wrappers import ResampleInvalidActionWrapper


def run_random(steps: int = 2000, seed: int | None = None, frame_ms: int = 50) -> float:
    env = ResampleInvalidActionWrapper(gym.make("FallingBlock-10x20-v0", frame_ms=frame_ms), seed=seed)
    obs, info = env.reset(seed=seed)
    env.action_space.seed(seed)
    total_reward = 0.0
    episodes = 0
    for _ in range(steps):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        if terminated or truncated:
            episodes += 1
            print(f"Episode {episodes}: score={info['score']} level={info['level']} "
                  f"lines={info['lines_cleared_total']}")
            obs, info = env.reset()
    env.close()
    print(f"Random agent total reward: {total_reward:.2f} over {episodes} finished episode(s)")
    return total_reward


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--steps", type=int, default=2000)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--frame-ms", type=int, default=50)
    p.add_argument("--verbose", action="store_true", help="Log engine events")
    return p


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    run_random(steps=args.steps, seed=args.seed, frame_ms=args.frame_ms)


if __name__ == "__main__":  # pragma: no cover
    main()

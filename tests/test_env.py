from __future__ import annotations

import gymnasium as gym
import numpy as np

import falling_block_rl.env  # noqa: F401
from falling_block_rl.env.falling_block_env import FallingBlockEnv
from falling_block_rl.env.wrappers import ResampleInvalidActionWrapper
from falling_block_rl.game import Action, PieceKind


def test_reset_observation_matches_space():
    env = FallingBlockEnv()
    obs, info = env.reset(seed=3)
    assert env.observation_space.contains(obs)
    assert obs["board"].shape == (20, 10)
    assert obs["hold"] == 0
    assert obs["current"] in [int(k) for k in PieceKind]
    assert info["action_mask"].dtype == np.bool_
    assert info["action_mask"].shape == (len(Action),)


def test_step_applies_input_then_advances_clock():
    env = FallingBlockEnv(frame_ms=50)
    obs, _ = env.reset(seed=1)
    current = obs["current"]
    obs, reward, terminated, truncated, info = env.step(int(Action.HOLD))
    assert obs["hold"] == current
    assert info["input_accepted"]
    assert not info["action_mask"][int(Action.HOLD)]
    assert reward == 0.0
    assert not terminated and not truncated


def test_seeded_resets_are_reproducible():
    env = FallingBlockEnv()
    first, _ = env.reset(seed=11)
    second, _ = env.reset(seed=11)
    assert first["current"] == second["current"]
    assert first["next"] == second["next"]


def test_random_rollout_stays_in_space():
    env = ResampleInvalidActionWrapper(FallingBlockEnv(frame_ms=100, max_episode_steps=300), seed=0)
    obs, _ = env.reset(seed=0)
    env.action_space.seed(0)
    for _ in range(300):
        obs, reward, terminated, truncated, info = env.step(env.action_space.sample())
        assert env.observation_space.contains(obs)
        assert reward >= 0.0
        if terminated or truncated:
            break
    assert terminated or truncated


def test_truncates_after_max_steps():
    env = FallingBlockEnv(max_episode_steps=3)
    env.reset(seed=0)
    results = [env.step(int(Action.NONE)) for _ in range(3)]
    assert [r[3] for r in results] == [False, False, True]


def test_rgb_render():
    env = FallingBlockEnv(render_mode="rgb_array")
    env.reset(seed=0)
    frame = env.render()
    assert frame.shape == (240, 120, 3)
    assert frame.dtype == np.uint8


def test_registered_with_gymnasium():
    env = gym.make("FallingBlock-10x20-v0")
    obs, info = env.reset(seed=2)
    assert "board" in obs
    env.close()

from __future__ import annotations

import numpy as np
import gymnasium as gym
from gymnasium import spaces


class ResampleInvalidActionWrapper(gym.Wrapper):
    """If a sampled input would be rejected by the engine, resample uniformly
    among the inputs it currently accepts.

    Useful when training with vanilla PPO (no action masking).
    """

    def __init__(self, env: gym.Env, seed: int | None = None):
        super().__init__(env)
        assert isinstance(env.action_space, spaces.Discrete)
        self._rng = np.random.default_rng(seed)

    def step(self, action):  # type: ignore[override]
        mask = self.get_action_mask()
        if 0 <= int(action) < mask.shape[0] and not bool(mask[int(action)]):
            valid_idxs = np.flatnonzero(mask)
            if valid_idxs.size > 0:
                action = int(self._rng.choice(valid_idxs))
        return self.env.step(action)

    def get_action_mask(self) -> np.ndarray:
        return self.env.unwrapped.get_action_mask()

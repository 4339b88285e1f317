from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from falling_block_rl.game import Action, FallingBlockGame, GameConfig, ScoringRules
from falling_block_rl.game.pieces import Color, PieceKind


PALETTE: Dict[int, Tuple[int, int, int]] = {
    Color.NONE: (30, 30, 36),
    Color.CYAN: (0, 240, 240),
    Color.YELLOW: (240, 240, 0),
    Color.MAGENTA: (160, 0, 240),
    Color.GREEN: (0, 240, 0),
    Color.RED: (240, 0, 0),
    Color.BLUE: (0, 0, 240),
    Color.GRAY: (240, 160, 0),
}


def _compute_action_mask(game: FallingBlockGame) -> np.ndarray:
    mask = np.zeros((len(Action),), dtype=np.bool_)
    for action, accepted in game.accepted_actions().items():
        mask[int(action)] = accepted
    return mask


class FallingBlockEnv(gym.Env):
    """Frame-stepped environment: each step applies one input, then advances
    the engine clock by ``frame_ms`` milliseconds."""

    metadata = {"render_modes": ["rgb_array"], "render_fps": 20}

    def __init__(self, config: Optional[GameConfig] = None, rules: Optional[ScoringRules] = None,
                 render_mode: Optional[str] = None,
                 frame_ms: int = 50,
                 max_episode_steps: int = 10000,
                 reward_weights: Optional[Dict[str, float]] = None,
                 step_penalty: float = 0.0,
                 terminal_penalty: float = 0.0) -> None:
        super().__init__()
        self.game = FallingBlockGame(config, rules)
        self.render_mode = render_mode
        self.frame_ms = int(frame_ms)
        self.max_episode_steps = int(max_episode_steps)

        self.step_penalty = float(step_penalty)
        self.terminal_penalty = float(terminal_penalty)
        self.reward_weights: Dict[str, float] = {
            "score": 1.0,   # per point of engine score gained
            "lines": 0.0,   # extra per line cleared
        }
        if reward_weights:
            self.reward_weights.update({k: float(v) for k, v in reward_weights.items()})

        height = self.game.playfield.height
        width = self.game.playfield.width
        kinds = len(PieceKind) + 1

        # Board holds color codes, the falling piece is overlaid as negative kind codes
        self.observation_space = spaces.Dict(
            {
                "board": spaces.Box(low=-len(PieceKind), high=len(PieceKind), shape=(height, width), dtype=np.int8),
                "current": spaces.Discrete(kinds),
                "next": spaces.Discrete(kinds),
                "hold": spaces.Discrete(kinds),
                "level": spaces.Discrete(self.game.rules.max_level + 1),
            }
        )
        self.action_space = spaces.Discrete(len(Action))

        self._last_obs: Optional[Dict[str, Any]] = None
        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        hold = self.game.hold_piece
        obs: Dict[str, Any] = {
            "board": self.game.get_state().astype(np.int8),
            "current": int(self.game.current_piece.kind),
            "next": int(self.game.next_piece.kind),
            "hold": int(hold.kind) if hold is not None else 0,
            "level": int(self.game.level),
        }
        return obs

    def _get_info(self) -> Dict[str, Any]:
        info: Dict[str, Any] = {
            "action_mask": _compute_action_mask(self.game),
            "score": self.game.score,
            "level": self.game.level,
            "lines_cleared_total": self.game.lines_cleared_total,
            "steps": self._steps,
        }
        return info

    def get_action_mask(self) -> np.ndarray:
        return _compute_action_mask(self.game)

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        self.game.reset(seed)
        self._steps = 0
        obs = self._get_obs()
        info = self._get_info()
        self._last_obs = obs
        return obs, info

    def step(self, action: int):
        score_before = self.game.score
        lines_before = self.game.lines_cleared_total

        accepted = self.game.handle_input(Action(int(action)))
        self.game.update(self.frame_ms)
        self._steps += 1

        reward_components: Dict[str, float] = {
            "score": self.reward_weights["score"] * float(self.game.score - score_before),
            "lines": self.reward_weights["lines"] * float(self.game.lines_cleared_total - lines_before),
            "step": self.step_penalty,
        }
        terminated = bool(self.game.game_over)
        truncated = self._steps >= self.max_episode_steps and not terminated
        if terminated:
            reward_components["terminal"] = self.terminal_penalty

        reward = float(sum(reward_components.values()))

        obs = self._get_obs()
        info = self._get_info()
        info["reward_components"] = reward_components
        info["input_accepted"] = accepted
        self._last_obs = obs
        return obs, reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        board = self._last_obs["board"] if self._last_obs is not None else self.game.get_state()
        cell = 12
        h, w = board.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        for y in range(h):
            for x in range(w):
                color = PALETTE.get(abs(int(board[y, x])), (200, 200, 200))
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
        return img

    def close(self) -> None:
        pass

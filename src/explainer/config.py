"""Centralized analysis configuration.

Every heuristic threshold used by the detectors, the sacrifice classifier
and the composer lives here so tests can exercise boundary behavior by
constructing a Settings with overrides. Values are read from EXPLAINER_*
environment variables (or a .env.explainer file) when not passed directly.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="EXPLAINER_",
        env_file=".env.explainer",
        env_file_encoding="utf-8",
    )

    # Composer
    max_reasons: int = Field(default=2, ge=1)
    show_see_values: bool = True
    winning_eval: float = 3.0
    balanced_eval: float = 0.3

    # Evaluation strings are mover-relative unless this is set
    white_point_of_view: bool = False

    # Sacrifice / brilliancy (pawns)
    decisive_advantage: float = 2.0
    bad_position: float = 0.70
    sacrifice_min_material: int = 2
    sacrifice_min_eval: float = 0.5
    exchange_sacrifice_min_eval: float = -0.5

    # Detector tuning
    singular_gap: float = 1.5
    relative_pin_min_gain: int = 4
    fork_min_target_value: int = 3
    decoy_max_king_squares: int = 2
    perpetual_min_plies: int = 8
    perpetual_check_ratio: float = 0.6
    perpetual_window: int = 12

    # Move quality (pawns lost relative to the position before the move)
    blunder_threshold: float = 3.0
    mistake_threshold: float = 1.0
    inaccuracy_threshold: float = 0.3
    excellent_threshold: float = 0.1

    # Scratch-board pool
    pool_max_size: int = Field(default=50, ge=0)

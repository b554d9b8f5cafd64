"""Tunable policy constants for sketch interpretation and rendering."""

from __future__ import annotations

import copy
from dataclasses import dataclass


@dataclass
class InterpretationConfig:
    # max distance between a stroke and the element it attaches to
    attachment_threshold: float = 40.0
    final_ring_scale: float = 0.9
    circle_step_degrees: float = 2.0
    arrow_head_length: float = 20.0
    arrow_head_half_width: float = 30.0
    # loop radius as a fraction of the state radius
    cycle_loop_scale: float = 0.5
    transition_label_offset: float = 50.0
    default_state_radius: float = 40.0
    curve_samples: int = 24


_INTERPRETATION_CONFIG = InterpretationConfig()


def get_interpretation_config() -> InterpretationConfig:
    return copy.deepcopy(_INTERPRETATION_CONFIG)


def set_interpretation_config(config: InterpretationConfig) -> None:
    global _INTERPRETATION_CONFIG
    _INTERPRETATION_CONFIG = copy.deepcopy(config)

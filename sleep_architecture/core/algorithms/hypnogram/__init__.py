"""
Hypnogram analysis implementations.

This package analyzes one night of per-epoch sleep stages (W, N1-N4, R,
lights on, unscored) in layered passes:

    - stages:      Stage predicates and label normalization
    - windows:     Bounded look-ahead/look-back helpers
    - boundaries:  Lights out/on, sleep landmarks and summary statistics
    - cycles:      Persistent sleep, sleep states and NREM/REM cycle segmentation
    - transitions: Flanking runs, directional transitions, transition matrix
    - depth:       N2 depth trajectory (ascending vs descending N2)
    - elapsed:     Stage minutes accumulated before each epoch
    - clock:       Clock-time landmarks from the recording start time
    - analyzer:    HypnogramAnalyzer, which runs every pass in order

Presets:
    - DEFAULT_HYPNOGRAM_CONFIG: N4 merged into N3, three-class flanking
    - FULL_STAGE_HYPNOGRAM_CONFIG: N4 kept, exact-stage flanking

"""

from __future__ import annotations

from .analyzer import HypnogramAnalyzer, analyze_hypnogram
from .boundaries import locate_boundaries, recode_edges, summarize, validate_lights_structure, waso_flags
from .clock import compute_clock_times, parse_start_time
from .config import DEFAULT_HYPNOGRAM_CONFIG, FULL_STAGE_HYPNOGRAM_CONFIG, EpochThresholds, HypnogramConfig
from .cycles import persistent_sleep_flags, segment_cycles
from .depth import depth_trajectory
from .elapsed import elapsed_stage_minutes
from .stages import normalize_stages, three_class
from .transitions import analyze_transitions, transition_matrix

__all__ = [
    # Preset configs
    "DEFAULT_HYPNOGRAM_CONFIG",
    "FULL_STAGE_HYPNOGRAM_CONFIG",
    # Configuration
    "EpochThresholds",
    "HypnogramConfig",
    # Main classes
    "HypnogramAnalyzer",
    # Passes
    "analyze_hypnogram",
    "analyze_transitions",
    "compute_clock_times",
    "depth_trajectory",
    "elapsed_stage_minutes",
    "locate_boundaries",
    "normalize_stages",
    "parse_start_time",
    "persistent_sleep_flags",
    "recode_edges",
    "segment_cycles",
    "summarize",
    "three_class",
    "transition_matrix",
    "validate_lights_structure",
    "waso_flags",
]

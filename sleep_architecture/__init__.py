#!/usr/bin/env python3
"""
Sleep Architecture Analysis.

Cycle segmentation, transition analysis and summary statistics for
per-epoch sleep stage annotations (hypnograms).
"""

__version__ = "0.1.0"
__description__ = "Sleep cycle and transition analysis for staged hypnograms"

"""Keyframe animation.

Components:
    keyframes: Linear interpolation between start/end keyframes and the
        frame stepper used for animated sequences
"""

from .keyframes import Animator, linear_position

__all__ = ["Animator", "linear_position"]

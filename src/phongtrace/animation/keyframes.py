"""Linear keyframe animation of object and light positions.

An object or light moves only when it is animatable and has both a start and
an end keyframe. At frame f of a timeline with total_frames steps its position
is

    start + (end - start) * (f / total_frames)

so frame 0 is exactly the start keyframe and frame total_frames exactly the
end keyframe.

Animator walks the timeline the way the interactive player does: step()
advances one frame and wraps from the last frame back to 0, and landing on
frame 0 resets every moving item to its start keyframe. Positions are
changed on the host-side records only, so the change reaches the renderer at
the next SceneManager.upload(), i.e. between render passes.

Example:
    >>> linear_position(50, (0.0, 0.0, 0.0), (10.0, 0.0, 0.0), 100)
    (5.0, 0.0, 0.0)
"""

from typing import TYPE_CHECKING

from phongtrace.scene.objects import Vec3

if TYPE_CHECKING:
    from phongtrace.scene.manager import SceneManager


def linear_position(frame: int, start: Vec3, end: Vec3, total_frames: int) -> Vec3:
    """Interpolate linearly between two keyframes.

    Args:
        frame: Current frame index.
        start: Position at frame 0.
        end: Position at frame total_frames.
        total_frames: Length of the timeline (at least 1).

    Returns:
        The interpolated position.

    Raises:
        ValueError: If total_frames is less than 1.
    """
    if total_frames < 1:
        raise ValueError(f"total_frames must be at least 1, got {total_frames}")
    fraction = frame / total_frames
    return (
        start[0] + (end[0] - start[0]) * fraction,
        start[1] + (end[1] - start[1]) * fraction,
        start[2] + (end[2] - start[2]) * fraction,
    )


class Animator:
    """Frame counter driving keyframe animation of a scene.

    Attributes:
        scene: The scene whose objects and lights are moved.
        frame: The current frame index, in [0, total_frames].
    """

    def __init__(self, scene: "SceneManager", total_frames: int = 50) -> None:
        """Create an animator positioned at frame 0.

        The scene is not touched until step(), seek(), reset() or apply() is
        called.

        Raises:
            ValueError: If total_frames is less than 1.
        """
        self.scene = scene
        self.frame = 0
        self._total_frames = 1
        self.total_frames = total_frames

    @property
    def total_frames(self) -> int:
        """Length of the timeline."""
        return self._total_frames

    @total_frames.setter
    def total_frames(self, value: int) -> None:
        if value < 1:
            raise ValueError(f"total_frames must be at least 1, got {value}")
        self._total_frames = int(value)
        self.frame = min(self.frame, self._total_frames)

    @property
    def at_end(self) -> bool:
        """True on the last frame of the timeline."""
        return self.frame >= self._total_frames

    def apply(self) -> int:
        """Move every moving object and light to its position at the current frame.

        Returns:
            The number of items moved.
        """
        movable = self.scene.movable()
        for item in movable:
            behavior = item.behavior
            if self.frame == 0:
                item.position = behavior.start_keyframe
            else:
                item.position = linear_position(
                    self.frame, behavior.start_keyframe, behavior.end_keyframe, self._total_frames
                )
        return len(movable)

    def step(self) -> int:
        """Advance one frame, wrapping from the last frame back to frame 0.

        Returns:
            The new frame index.
        """
        self.frame = 0 if self.frame >= self._total_frames else self.frame + 1
        self.apply()
        return self.frame

    def seek(self, frame: int) -> None:
        """Jump to a frame and apply it.

        Raises:
            ValueError: If frame is outside [0, total_frames].
        """
        if not 0 <= frame <= self._total_frames:
            raise ValueError(f"frame must be in [0, {self._total_frames}], got {frame}")
        self.frame = int(frame)
        self.apply()

    def reset(self) -> None:
        """Return to frame 0, restoring every moving item to its start keyframe."""
        self.seek(0)

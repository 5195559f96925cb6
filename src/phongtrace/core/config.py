"""Render and shading configuration.

Two dataclasses carry every tunable number of the renderer:

    ShadingConfig: lighting model coefficients and ray-query policy.
    RenderSettings: output raster size, anti-aliasing and animation length.

The interactive front end historically exposed these as sliders named
``Kd``, ``Ks``, ``ambient``, ``shininess``, ``totalFrames`` and
``antiAliasing``. options_from_dict() accepts those names (plus snake-case
extras) so option files written for it keep working.

Example:
    >>> shading, settings = options_from_dict({"Kd": 20.0, "antiAliasing": False})
    >>> shading.kd
    20.0
    >>> settings.anti_aliasing
    False
"""

from dataclasses import asdict, dataclass, field
from typing import Any

# Upper bound on mirror bounces; shading loops are unrolled to this length
MAX_DEPTH_LIMIT = 16


@dataclass
class ShadingConfig:
    """Coefficients for ambient + Lambert + Phong shading.

    Attributes:
        ambient: Constant term multiplied with the diffuse color.
        kd: Diffuse (Lambert) strength.
        ks: Specular (Phong) strength.
        shininess: Specular falloff exponent.
        shadow_bias: Distance the shadow-ray origin is pushed off the surface
            along the normal.
        max_depth: Maximum number of mirror bounces followed per camera ray.
        background: RGB color returned for rays that hit nothing.
        cull_behind_origin: When True, intersections behind (or at) the ray
            origin are rejected. When False every root of the intersection
            equation counts, including negative parametric distances.
    """

    ambient: float = 0.1
    kd: float = 33.0
    ks: float = 70.0
    shininess: float = 60.0
    shadow_bias: float = 0.05
    max_depth: int = 5
    background: tuple[float, float, float] = (0.0, 0.0, 0.0)
    cull_behind_origin: bool = True

    def validate(self) -> None:
        """Check that all values are usable.

        Raises:
            ValueError: If any coefficient is out of range.
        """
        for name in ("ambient", "kd", "ks", "shininess", "shadow_bias"):
            if getattr(self, name) < 0.0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")
        if not 0 <= self.max_depth <= MAX_DEPTH_LIMIT:
            raise ValueError(
                f"max_depth must be in [0, {MAX_DEPTH_LIMIT}], got {self.max_depth}"
            )
        if len(self.background) != 3:
            raise ValueError(f"background must have 3 components, got {self.background}")


@dataclass
class RenderSettings:
    """Output raster and animation settings.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        anti_aliasing: Use 3x3 supersampling per pixel when True.
        total_frames: Number of animation steps between start and end keyframes.
        output: Output image path; animated frames insert the frame number
            before the suffix.
    """

    width: int = 1200
    height: int = 800
    anti_aliasing: bool = True
    total_frames: int = 50
    output: str = "RayTraced.jpg"

    def validate(self) -> None:
        """Check that all values are usable.

        Raises:
            ValueError: If the image size or frame count is invalid.
        """
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if self.total_frames < 1:
            raise ValueError(f"total_frames must be at least 1, got {self.total_frames}")


# Option name -> (target, attribute)
_OPTION_KEYS: dict[str, tuple[str, str]] = {
    "Kd": ("shading", "kd"),
    "Ks": ("shading", "ks"),
    "ambient": ("shading", "ambient"),
    "shininess": ("shading", "shininess"),
    "totalFrames": ("settings", "total_frames"),
    "antiAliasing": ("settings", "anti_aliasing"),
    "shadow_bias": ("shading", "shadow_bias"),
    "max_depth": ("shading", "max_depth"),
    "background": ("shading", "background"),
    "cull_behind_origin": ("shading", "cull_behind_origin"),
    "width": ("settings", "width"),
    "height": ("settings", "height"),
    "output": ("settings", "output"),
}


def options_from_dict(options: dict[str, Any]) -> tuple[ShadingConfig, RenderSettings]:
    """Build shading and render configuration from a flat options mapping.

    Args:
        options: Mapping of option names to values. Missing keys keep their
            defaults.

    Returns:
        Tuple of (ShadingConfig, RenderSettings), both validated.

    Raises:
        ValueError: If an option name is unknown or a value is out of range.
    """
    shading = ShadingConfig()
    settings = RenderSettings()
    targets = {"shading": shading, "settings": settings}

    for key, value in options.items():
        if key not in _OPTION_KEYS:
            raise ValueError(f"Unknown option: {key}")
        target, attr = _OPTION_KEYS[key]
        if attr == "background":
            value = (float(value[0]), float(value[1]), float(value[2]))
        elif attr in ("anti_aliasing", "cull_behind_origin"):
            value = bool(value)
        elif attr in ("width", "height", "total_frames", "max_depth"):
            value = int(value)
        elif attr != "output":
            value = float(value)
        setattr(targets[target], attr, value)

    shading.validate()
    settings.validate()
    return shading, settings


def options_to_dict(shading: ShadingConfig, settings: RenderSettings) -> dict[str, Any]:
    """Export configuration using the same option names options_from_dict() reads."""
    values = {"shading": asdict(shading), "settings": asdict(settings)}
    result: dict[str, Any] = {}
    for key, (target, attr) in _OPTION_KEYS.items():
        value = values[target][attr]
        result[key] = list(value) if isinstance(value, tuple) else value
    return result


@dataclass
class RenderOptions:
    """Shading and render settings bundled together for convenience."""

    shading: ShadingConfig = field(default_factory=ShadingConfig)
    settings: RenderSettings = field(default_factory=RenderSettings)

    @classmethod
    def from_dict(cls, options: dict[str, Any]) -> "RenderOptions":
        """Create options from a flat option mapping (see options_from_dict)."""
        shading, settings = options_from_dict(options)
        return cls(shading=shading, settings=settings)

    def to_dict(self) -> dict[str, Any]:
        """Export to a flat option mapping."""
        return options_to_dict(self.shading, self.settings)

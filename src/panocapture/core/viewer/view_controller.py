"""
Camera controls for browsing a finished panorama.

Dragging rotates the view (0.3° per pixel, vertical drag inverted so dragging
up looks down), pitch is clamped to ±85° so the view never flips over the
poles, and the wheel zooms by changing the field of view within 30-120°.
A project can carry a "before" and an optional "after" panorama; the viewer
toggles between them.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from panocapture.core.orientation.angles import clamp
from panocapture.utils.config_sections import ViewerConfig, load_viewer_config


@dataclass
class ViewState:
    pitch: float = 0.0  # Rotation around x (degrees, + looks up)
    yaw: float = 0.0    # Rotation around y (degrees, unbounded)
    fov: float = 75.0   # Field of view (degrees)


class ViewController:
    """Drag/zoom state of the panorama viewer."""

    def __init__(
        self,
        before_image_url: str,
        after_image_url: Optional[str] = None,
        config: Optional[ViewerConfig] = None,
    ) -> None:
        self.config = config or load_viewer_config()
        self.before_image_url = before_image_url
        self.after_image_url = after_image_url

        self.view = ViewState(fov=self.config.default_fov)
        self.show_after = False
        self.dragging = False
        self._last_pointer: Tuple[float, float] = (0.0, 0.0)

    # Drag -----------------------------------------------------------------

    def drag_start(self, x: float, y: float) -> None:
        self.dragging = True
        self._last_pointer = (x, y)

    def drag_move(self, x: float, y: float) -> ViewState:
        if not self.dragging:
            return self.view

        delta_x = x - self._last_pointer[0]
        delta_y = y - self._last_pointer[1]
        sensitivity = self.config.drag_sensitivity

        self.view.pitch = clamp(
            self.view.pitch - delta_y * sensitivity,
            -self.config.max_pitch,
            self.config.max_pitch,
        )
        self.view.yaw += delta_x * sensitivity
        self._last_pointer = (x, y)
        return self.view

    def drag_end(self) -> None:
        self.dragging = False

    # Zoom -----------------------------------------------------------------

    def zoom(self, wheel_delta: float) -> float:
        """Positive wheel delta zooms out (wider FOV)."""
        self.view.fov = clamp(
            self.view.fov + wheel_delta * self.config.zoom_sensitivity,
            self.config.min_fov,
            self.config.max_fov,
        )
        return self.view.fov

    def reset(self) -> None:
        self.view = ViewState(fov=self.config.default_fov)

    # Before / after -------------------------------------------------------

    @property
    def has_after(self) -> bool:
        return bool(self.after_image_url)

    def toggle_after(self) -> bool:
        """Switch between before/after. Stays on "before" without an after image."""
        self.show_after = not self.show_after and self.has_after
        return self.show_after

    @property
    def current_image_url(self) -> str:
        if self.show_after and self.after_image_url:
            return self.after_image_url
        return self.before_image_url

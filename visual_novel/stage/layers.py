"""
Background layers - two alternating visual buffers.

The sequencer paints the hidden layer and then swaps, so the outgoing
layer can fade out while the incoming one fades in. Which layer is in
front is an explicit index, never read back from presentation state.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Layer:
    """
    One background layer.

    Attributes:
        name: Layer label (for logs and renderers)
        image: Path of the assigned image, or None
        fill: Flat fallback colour when there is no image
        visible: Whether this layer is the one shown
        animating: Whether the entrance animation is applied
        animation_epoch: Bumped on every restart so a renderer replays
            the animation even if it was already applied
        focus: Camera focal point as (x, y) percentages, or None
    """

    name: str = ""
    image: str | None = None
    fill: str | None = None
    visible: bool = False
    animating: bool = False
    animation_epoch: int = 0
    focus: tuple[float, float] | None = None

    def assign_image(self, image: str) -> None:
        self.image = image
        self.fill = None

    def assign_fill(self, fill: str) -> None:
        self.image = None
        self.fill = fill

    def restart_animation(self) -> None:
        """Remove and re-apply the entrance animation."""
        self.animating = False
        self.animation_epoch += 1
        self.animating = True

    def clear(self) -> None:
        """Drop image and animation state after fading out."""
        self.image = None
        self.animating = False
        self.focus = None


@dataclass
class Stage:
    """Exactly two layers and the index of the front one."""

    layers: tuple[Layer, Layer] = field(
        default_factory=lambda: (Layer(name="layer-0", visible=True), Layer(name="layer-1"))
    )
    active_index: int = 0

    def __post_init__(self):
        if len(self.layers) != 2:
            raise ValueError(f"Stage needs exactly 2 layers, got {len(self.layers)}")
        if self.active_index not in (0, 1):
            raise ValueError(f"active_index must be 0 or 1, got {self.active_index}")

    @property
    def hidden_index(self) -> int:
        return 1 - self.active_index

    @property
    def active(self) -> Layer:
        return self.layers[self.active_index]

    @property
    def hidden(self) -> Layer:
        return self.layers[self.hidden_index]

    def swap(self) -> tuple[Layer, Layer]:
        """Bring the hidden layer to the front.

        Returns:
            (incoming, outgoing) layers.
        """
        incoming = self.hidden
        outgoing = self.active
        incoming.visible = True
        outgoing.visible = False
        self.active_index = self.hidden_index
        return incoming, outgoing


__all__ = ["Layer", "Stage"]

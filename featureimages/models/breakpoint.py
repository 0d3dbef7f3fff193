from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from .image_reference import ImageReference


class Breakpoint(BaseModel):
    """A responsive width threshold and the page field holding its image."""

    model_config = ConfigDict(frozen=True)

    threshold: str  # CSS length, e.g. "992px"
    field: str
    tier: str
    label: str
    size_hint: str
    inherits: bool = True  # Reuse the nearest larger tier's image when absent


class BreakpointImage(BaseModel):
    breakpoint: Breakpoint
    image: ImageReference | None = None

    @property
    def present(self) -> bool:
        return self.image is not None and self.image.present


# Bootstrap media sizes, largest first. A missing image at a smaller size falls
# back to the next larger one, except on mobile which has its own show/hide rule.
BREAKPOINTS: tuple[Breakpoint, ...] = (
    Breakpoint(threshold="1367px", field="feature_image_large", tier="large", label="Large", size_hint="1920 x 250 px"),
    Breakpoint(threshold="992px", field="feature_image_medium", tier="medium", label="Medium", size_hint="1366 x 180 px"),
    Breakpoint(threshold="768px", field="feature_image_small", tier="small", label="Small", size_hint="991 x 180 px"),
    Breakpoint(
        threshold="1px",
        field="feature_image_mobile",
        tier="mobile",
        label="Mobile",
        size_hint="767 x 210 px",
        inherits=False,
    ),
)

MOBILE_BREAKPOINT = BREAKPOINTS[-1]


def get_breakpoint(tier: str) -> Breakpoint:
    for bp in BREAKPOINTS:
        if bp.tier == tier:
            return bp
    raise KeyError(tier)

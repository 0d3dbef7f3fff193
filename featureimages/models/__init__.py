from .breakpoint import BREAKPOINTS, MOBILE_BREAKPOINT, Breakpoint, BreakpointImage, get_breakpoint
from .form_field import FEATURE_IMAGES_TAB, FormField
from .image_reference import ImageReference
from .page import FeatureImageOptions, Page, PageUpdate

__all__ = [
    "BREAKPOINTS",
    "MOBILE_BREAKPOINT",
    "Breakpoint",
    "BreakpointImage",
    "get_breakpoint",
    "FEATURE_IMAGES_TAB",
    "FormField",
    "ImageReference",
    "FeatureImageOptions",
    "Page",
    "PageUpdate",
]

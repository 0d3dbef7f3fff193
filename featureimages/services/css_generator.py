"""Responsive background CSS for feature images.

Given the page's images ordered from the largest breakpoint to the smallest,
emit one ``@media (min-width: …)`` background rule per breakpoint that has an
image. A breakpoint without its own image reuses the image of the nearest
larger breakpoint; the images share a height and are centred, so only the
breakpoint context changes. A single mobile rule then shows or hides the
feature image below 768px.

The generated text matches the CSS files written by earlier releases
byte-for-byte, so existing cached includes stay valid.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from functools import reduce
from typing import Callable, Iterable, Optional, Sequence, Tuple

from featureimages.models import BreakpointImage, ImageReference

UrlResolver = Callable[[ImageReference], str]

BACKGROUND_COLOUR = "#231f20"
MOBILE_MAX_WIDTH = "767px"

_MOBILE_SHOW_RULE = (
    f"@media (max-width: {MOBILE_MAX_WIDTH}) {{\n"
    "\t.feature-image {\n"
    "\t\tdisplay: block!important; margin-bottom: 0!important;\n"
    "\t}\n"
    "\t.feature-image .row{margin-top: 188px!important;}\n"
    "}\n\n"
)

# Hide the feature image completely on mobile; the min-width rules override it.
_MOBILE_HIDE_RULE = (
    f"@media (max-width: {MOBILE_MAX_WIDTH}) {{\n"
    "\t.feature-image {\n"
    "\t\tdisplay: none;\n"
    "\t\tvisibility: hidden;\n"
    "\t}\n"
    "}\n\n"
)


@dataclass(frozen=True)
class ResolvedTier:
    threshold: str
    url: str
    inherited: bool = False


@dataclass(frozen=True)
class GeneratedCSS:
    css: str
    tiers: Tuple[ResolvedTier, ...] = field(default_factory=tuple)
    # Largest image available. Kept for legacy browsers that ignore media
    # queries; not written to the CSS yet.
    largest_url: Optional[str] = None


def host_relative_url(url: str, protocol_and_host: str) -> str:
    """Strip *protocol_and_host* from the front of *url*.

    The result is absolute relative to the web root, so the CSS keeps working
    in environments served under a different host name. URLs on any other
    host are returned unchanged.
    """

    host = protocol_and_host.rstrip("/")
    if host and url.startswith(host):
        return url[len(host):]
    return url


def make_url_resolver(protocol_and_host: str) -> UrlResolver:
    def resolve(image: ImageReference) -> str:
        return host_relative_url(image.url, protocol_and_host)

    return resolve


def background_rule(threshold: str, url: str) -> str:
    return (
        f"@media (min-width: {threshold}) {{\n"
        "\t.feature-image {\n"
        f"\t\tbackground: url({url}) {BACKGROUND_COLOUR} no-repeat;\n"
        "\t\tbackground-position:center;"
        "\t}\n"
        "}\n\n"
    )


def mobile_rule(mobile_provided: bool) -> str:
    return _MOBILE_SHOW_RULE if mobile_provided else _MOBILE_HIDE_RULE


class ResponsiveBackgroundCSSGenerator:
    """Stateless generator; one instance can be shared between callers."""

    def resolve_tiers(
        self,
        breakpoints: Iterable[BreakpointImage],
        url_resolver: UrlResolver,
    ) -> Tuple[ResolvedTier, ...]:
        """Fold the breakpoints, largest first, into the tiers that get a rule.

        The breakpoints are taken in the order given; that order is the
        fallback precedence and is never re-sorted.
        """

        def step(
            acc: Tuple[Tuple[ResolvedTier, ...], Optional[str]],
            item: BreakpointImage,
        ) -> Tuple[Tuple[ResolvedTier, ...], Optional[str]]:
            resolved, previous_url = acc
            if item.present:
                url = url_resolver(item.image)
                return resolved + (ResolvedTier(item.breakpoint.threshold, url),), url
            if previous_url is not None and item.breakpoint.inherits:
                tier = ResolvedTier(item.breakpoint.threshold, previous_url, inherited=True)
                return resolved + (tier,), previous_url
            return resolved, previous_url

        resolved, _ = reduce(step, breakpoints, ((), None))
        return resolved

    def build(
        self,
        breakpoints: Sequence[BreakpointImage],
        mobile_provided: bool,
        url_resolver: UrlResolver,
    ) -> GeneratedCSS:
        tiers = self.resolve_tiers(breakpoints, url_resolver)
        clauses = [background_rule(t.threshold, t.url) for t in tiers]
        clauses.append(mobile_rule(mobile_provided))
        # Clauses were built large to small; the file needs them small to large.
        css = "\n".join(reversed(clauses))
        largest_url = tiers[0].url if tiers else None
        return GeneratedCSS(css=css, tiers=tiers, largest_url=largest_url)

    def generate(
        self,
        breakpoints: Sequence[BreakpointImage],
        mobile_provided: bool,
        url_resolver: UrlResolver,
    ) -> str:
        return self.build(breakpoints, mobile_provided, url_resolver).css

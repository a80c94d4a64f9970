"""Hero slideshow state.

A fixed-interval timer advances the displayed index modulo the image count;
manual forward/back controls move relative to the current index; indicator
dots jump directly. The timer is a single asyncio task scoped to the
slideshow's lifetime and cancelled on teardown.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from schoolsite.config import SLIDESHOW_INTERVAL_SECONDS

from .renderer import attr

logger = logging.getLogger(__name__)


class Slideshow:
    """Cycle through a fixed list of image URLs.

    Examples
    --------
    >>> show = Slideshow(["a.jpg", "b.jpg", "c.jpg"])
    >>> show.advance(); show.advance(); show.advance()
    >>> show.current_index
    0
    >>> show.previous()
    >>> show.current_image
    'c.jpg'
    """

    def __init__(
        self, images: Sequence[str], interval: float = SLIDESHOW_INTERVAL_SECONDS
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.images: list[str] = [image for image in images if image]
        self.interval = interval
        self.current_index = 0
        self._task: asyncio.Task[None] | None = None

    def __len__(self) -> int:
        return len(self.images)

    @property
    def current_image(self) -> str | None:
        return self.images[self.current_index] if self.images else None

    def advance(self) -> None:
        """Timer tick: move to the next image, wrapping around."""
        if self.images:
            self.current_index = (self.current_index + 1) % len(self.images)

    def next(self) -> None:
        self.advance()

    def previous(self) -> None:
        if self.images:
            self.current_index = (self.current_index - 1) % len(self.images)

    def go_to(self, index: int) -> None:
        """Jump to an indicator dot."""
        if not 0 <= index < len(self.images):
            raise IndexError(f"slide {index} out of range for {len(self.images)} images")
        self.current_index = index

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.advance()

    def start(self) -> None:
        """Start the timer; a single image (or none) needs no timer."""
        if len(self.images) <= 1 or self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._tick())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def __aenter__(self) -> Slideshow:
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    def render(self) -> str:
        """Render frames and indicator dots for the current state."""
        if not self.images:
            return ""
        frames = []
        dots = []
        for index, image in enumerate(self.images):
            active = ' class="active"' if index == self.current_index else ""
            frames.append(
                f'<div{active} style="background-image: url(\'{attr(image)}\')"></div>'
            )
            dots.append(
                f'<button{active} data-slide="{index}" '
                f'aria-label="Go to slide {index + 1}"></button>'
            )
        return (
            f'<div class="slideshow" data-interval="{int(self.interval * 1000)}">'
            f'{"".join(frames)}<div class="dots">{"".join(dots)}</div></div>'
        )

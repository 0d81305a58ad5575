"""
comingsoon/view.py

Full-screen terminal rendering of the coming-soon page using blessed.

The view reads keys without blocking and yields to the event loop
between polls, so the ticker and network requests keep running on the
same thread.
"""

import asyncio
import logging
from typing import List, Optional

from blessed import Terminal
from blessed.keyboard import Keystroke

from .page import ComingSoonPage
from .subscription import StatusType

logger = logging.getLogger(__name__)

PILL = "● Building something new"
TITLE = "Coming Soon"
BLURB = (
    "We're crafting a modern experience. Be the first to know when we "
    "launch and get early access perks."
)
EMAIL_PLACEHOLDER = "Enter your email"
SUPPORTERS_LABEL = "Early supporters"
FEATURES = [
    ("Fast", "Performance-first experience"),
    ("Secure", "Best practices by default"),
    ("Polished", "Thoughtful details and design"),
]
TIP = "Tip: set COMINGSOON_BACKEND_URL to your API to enable signups."
UNPINNED_HINT = "Launch date not pinned; set launch_date to keep the deadline fixed."
KEYS_HINT = "Enter: submit   Backspace: delete   Esc: quit"

CELL_WIDTH = 11
FIELD_WIDTH = 40
POLL_INTERVAL = 0.05


class ComingSoonView:
    """
    Draws a ComingSoonPage and turns keystrokes into form actions.

    Args:
        page: Page to display
        term: blessed Terminal (a default one is created if omitted)
        width: Fixed render width; defaults to the terminal width
    """

    def __init__(
        self,
        page: ComingSoonPage,
        term: Optional[Terminal] = None,
        width: Optional[int] = None,
    ):
        self.page = page
        self.term = term or Terminal()
        self._width = width
        self.running = False
        self.dirty = True
        page.on_change = self.invalidate

    @property
    def width(self) -> int:
        return self._width or self.term.width or 80

    def invalidate(self) -> None:
        self.dirty = True

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def _center(self, text: str) -> str:
        return self.term.center(text, self.width)

    def render_countdown(self) -> List[str]:
        t = self.term
        cells = self.page.remaining.cells()
        border = " ".join("+" + "-" * CELL_WIDTH + "+" for _ in cells)
        values = " ".join(
            "|" + t.bold(value.center(CELL_WIDTH)) + "|" for _, value in cells
        )
        labels = " ".join(
            "|" + t.dim(label.upper().center(CELL_WIDTH)) + "|" for label, _ in cells
        )
        return [self._center(line) for line in (border, values, labels, border)]

    def render_form(self) -> List[str]:
        t = self.term
        form = self.page.form

        if form.email:
            shown = form.email[-FIELD_WIDTH:]
            field = shown.ljust(FIELD_WIDTH)
        else:
            field = t.dim(EMAIL_PLACEHOLDER.ljust(FIELD_WIDTH))

        button = f"[ {form.button_label} ]"
        button = t.dim(button) if not form.submit_enabled else t.bold(button)

        lines = [self._center(f"> {field}  {button}")]

        status = form.status
        if status.type is StatusType.SUCCESS:
            lines.append(self._center(t.green(status.message)))
        elif status.type is StatusType.ERROR:
            lines.append(self._center(t.red(status.message)))
        elif status.type is StatusType.LOADING:
            lines.append(self._center(t.dim(status.message)))
        else:
            lines.append("")
        return lines

    def render_footer(self) -> List[str]:
        t = self.term
        lines = [
            self._center(f"{t.dim(SUPPORTERS_LABEL)}  [ {self.page.form.badge_text} ]"),
            "",
            self._center("   ".join(t.bold(title) for title, _ in FEATURES)),
            self._center("   ".join(t.dim(desc) for _, desc in FEATURES)),
            "",
            self._center(t.dim(TIP)),
        ]
        if not self.page.target.pinned:
            lines.append(self._center(t.dim(UNPINNED_HINT)))
        lines.append(self._center(t.dim(KEYS_HINT)))
        return lines

    def render(self) -> List[str]:
        """Build the full frame as a list of lines."""
        t = self.term
        lines = [
            self._center(t.green(PILL)),
            "",
            self._center(t.bold(TITLE)),
            self._center(BLURB[: self.width]),
            "",
        ]
        lines += self.render_countdown()
        lines.append("")
        lines += self.render_form()
        lines.append("")
        lines += self.render_footer()
        return lines

    def draw(self) -> None:
        t = self.term
        lines = self.render()
        top = max(0, (t.height - len(lines)) // 2) if t.height else 0
        output = [t.home + t.clear]
        for offset, line in enumerate(lines):
            output.append(t.move_yx(top + offset, 0) + line)
        print("".join(output), end="", flush=True)
        self.dirty = False

    # -------------------------------------------------------------------------
    # Input
    # -------------------------------------------------------------------------

    def handle_key(self, key: Keystroke) -> None:
        """
        Apply one keystroke.

        Printable characters edit the email, Enter submits, Escape quits.
        """
        form = self.page.form

        if key.is_sequence:
            if key.name == "KEY_ENTER":
                # The field is required: an empty submit never reaches the form
                if form.email:
                    self.page.request_submit()
            elif key.name in ("KEY_BACKSPACE", "KEY_DELETE"):
                if form.email:
                    form.email = form.email[:-1]
            elif key.name == "KEY_ESCAPE":
                self.running = False
            return

        char = str(key)
        if char in ("\n", "\r"):
            if form.email:
                self.page.request_submit()
        elif char == "\x7f" or char == "\x08":
            if form.email:
                form.email = form.email[:-1]
        elif char == "\x1b":
            self.running = False
        elif char.isprintable():
            form.email = form.email + char

    async def run(self) -> None:
        """Mount the page and run the draw/input loop until Escape."""
        t = self.term
        self.running = True

        async with self.page:
            with t.fullscreen(), t.cbreak(), t.hidden_cursor():
                while self.running:
                    if self.dirty:
                        self.draw()
                    key = t.inkey(timeout=0)
                    if key:
                        self.handle_key(key)
                    else:
                        await asyncio.sleep(POLL_INTERVAL)

        logger.debug("View closed")

    async def snapshot(self) -> List[str]:
        """Mount, wait for the subscriber count, and return one frame."""
        async with self.page:
            await self.page.wait_idle()
            return self.render()

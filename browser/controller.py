"""Playwright browser controller for automated navigation."""

import logging
from dataclasses import dataclass

from playwright.async_api import Browser, BrowserContext, Locator, Page, async_playwright

from .base import REF_SIGIL, ActionExecutionError, Snapshot, is_ref

logger = logging.getLogger(__name__)

_REF_ATTRIBUTE = "data-agent-ref"

# Tags visible interactive elements with sequential refs (e1, e2, ...) in document
# order. Refs from a previous snapshot are cleared first.
_SNAPSHOT_SCRIPT = """
({ interactiveOnly, refAttribute }) => {
  const INTERACTIVE = [
    'a[href]', 'button', 'input:not([type=hidden])', 'select', 'textarea', 'summary',
    '[role=button]', '[role=link]', '[role=checkbox]', '[role=radio]', '[role=tab]',
    '[role=menuitem]', '[role=option]', '[role=switch]', '[role=combobox]', '[role=textbox]',
    '[contenteditable=""]', '[contenteditable=true]', '[onclick]',
  ].join(',');
  const TEXTUAL = 'h1,h2,h3,h4,h5,h6,p,li,label,th,td,caption,legend';

  document.querySelectorAll(`[${refAttribute}]`).forEach((el) => el.removeAttribute(refAttribute));

  const isVisible = (el) => {
    const rect = el.getBoundingClientRect();
    const style = window.getComputedStyle(el);
    return rect.width > 0 && rect.height > 0 && style.visibility !== 'hidden' && style.display !== 'none';
  };
  const clean = (text) => (text || '').replace(/\\s+/g, ' ').trim().slice(0, 80);
  const nameOf = (el) => clean(
    el.getAttribute('aria-label') || el.getAttribute('alt') || el.getAttribute('title')
    || el.innerText || el.getAttribute('placeholder') || el.getAttribute('name')
  );
  const roleOf = (el) => {
    const explicit = el.getAttribute('role');
    if (explicit) return explicit;
    const tag = el.tagName.toLowerCase();
    if (tag === 'a') return 'link';
    if (tag === 'select') return 'combobox';
    if (tag === 'textarea') return 'textbox';
    if (tag === 'input') {
      const type = (el.getAttribute('type') || 'text').toLowerCase();
      if (['checkbox', 'radio'].includes(type)) return type;
      if (['submit', 'button', 'reset', 'image'].includes(type)) return 'button';
      return 'textbox';
    }
    return tag;
  };

  const selector = interactiveOnly ? INTERACTIVE : `${INTERACTIVE},${TEXTUAL}`;
  const lines = [];
  let count = 0;
  for (const el of document.querySelectorAll(selector)) {
    if (!isVisible(el)) continue;
    if (el.matches(INTERACTIVE)) {
      count += 1;
      const ref = `e${count}`;
      el.setAttribute(refAttribute, ref);
      let line = `- ${roleOf(el)} "${nameOf(el)}"`;
      if ('value' in el && el.value && el.tagName !== 'BUTTON') line += ` value="${clean(el.value)}"`;
      if (el.checked) line += ' [checked]';
      if (el.disabled) line += ' [disabled]';
      lines.push(`${line} [ref=@${ref}]`);
    } else {
      const text = clean(el.innerText);
      if (text) lines.push(`- ${el.tagName.toLowerCase()}: ${text}`);
    }
  }
  return { title: document.title, url: window.location.href, lines, count };
}
"""


@dataclass(frozen=True, slots=True)
class ViewportSize:
    """Browser viewport dimensions."""

    width: int = 1280
    height: int = 720


class BrowserController:
    """Playwright wrapper implementing the agent's browser session interface."""

    __slots__ = (
        "_action_timeout_ms",
        "_browser",
        "_context",
        "_headless",
        "_page",
        "_playwright",
        "_refs",
        "_user_data_dir",
        "_viewport",
    )

    def __init__(
        self,
        viewport: ViewportSize | None = None,
        headless: bool = True,
        user_data_dir: str | None = None,
        action_timeout_ms: int = 10_000,
    ) -> None:
        self._viewport = viewport or ViewportSize()
        self._headless = headless
        self._user_data_dir = user_data_dir
        self._action_timeout_ms = action_timeout_ms
        self._playwright = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None
        self._refs: frozenset[str] = frozenset()

    @property
    def viewport(self) -> ViewportSize:
        return self._viewport

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Browser not started. Call start() first.")
        return self._page

    async def start(self) -> None:
        """Launch browser and create a page."""
        pw = await async_playwright().start()
        self._playwright = pw
        viewport = {"width": self._viewport.width, "height": self._viewport.height}

        if self._user_data_dir:
            logger.info("Using persistent context: %s", self._user_data_dir)
            self._context = await pw.chromium.launch_persistent_context(
                user_data_dir=self._user_data_dir,
                headless=self._headless,
                viewport=viewport,
            )
            self._page = self._context.pages[0] if self._context.pages else await self._context.new_page()
        else:
            self._browser = await pw.chromium.launch(headless=self._headless)
            self._context = await self._browser.new_context(viewport=viewport)
            self._page = await self._context.new_page()

        self._page.set_default_timeout(self._action_timeout_ms)
        logger.info(
            "Browser started (headless=%s, viewport=%dx%d)",
            self._headless, self._viewport.width, self._viewport.height,
        )

    async def stop(self) -> None:
        """Close browser and cleanup."""
        if self._context:
            await self._context.close()
        if self._browser:
            await self._browser.close()
        if self._playwright:
            await self._playwright.stop()
        self._page = None
        self._context = None
        self._browser = None
        self._playwright = None
        self._refs = frozenset()
        logger.info("Browser stopped")

    async def navigate(self, url: str) -> None:
        """Navigate to URL and wait for load."""
        logger.info("Navigating to %s", url)
        await self.page.goto(url, wait_until="load")
        self._refs = frozenset()

    async def get_snapshot(self, interactive: bool = True) -> Snapshot:
        """Assign fresh refs to interactive elements and render the element tree.

        Refs from any earlier snapshot stop resolving once this returns.
        """
        data = await self.page.evaluate(
            _SNAPSHOT_SCRIPT,
            {"interactiveOnly": interactive, "refAttribute": _REF_ATTRIBUTE},
        )
        self._refs = frozenset(f"{REF_SIGIL}e{n}" for n in range(1, data["count"] + 1))
        logger.info("Snapshot: %d interactive elements (interactive_only=%s)", data["count"], interactive)

        header = [f"Page: {data['title']}", f"URL: {data['url']}"]
        body = data["lines"] or ["(no visible elements)"]
        return Snapshot(tree="\n".join(header + body), refs=self._refs)

    def resolve(self, target: str) -> Locator:
        """Map a ref from the latest snapshot, or a CSS selector, to a locator."""
        if is_ref(target):
            if target not in self._refs:
                raise ActionExecutionError(
                    f"Unknown ref {target}. Refs are only valid until the next snapshot; take a new snapshot."
                )
            return self.page.locator(f'[{_REF_ATTRIBUTE}="{target[1:]}"]')
        if target.startswith(REF_SIGIL):
            raise ActionExecutionError(f"Malformed ref {target}. Expected a ref like @e1 or a CSS selector.")
        return self.page.locator(target)

    async def send_key(self, key: str) -> None:
        """Press a key or chord (Enter, Tab, Control+a, ...)."""
        logger.info("Pressing key: %s", key)
        await self.page.keyboard.press(key)

    async def scroll_by(self, delta_x: int, delta_y: int) -> None:
        logger.info("Scroll by (%d, %d)", delta_x, delta_y)
        await self.page.evaluate("([dx, dy]) => window.scrollBy(dx, dy)", [delta_x, delta_y])

    async def wait_timeout(self, ms: float) -> None:
        """Wait for a specified duration in milliseconds."""
        logger.info("Waiting %s ms", ms)
        await self.page.wait_for_timeout(ms)

    async def wait_for_selector(self, selector: str) -> None:
        logger.info("Waiting for selector %s", selector)
        await self.page.wait_for_selector(selector)

    async def current_url(self) -> str:
        """Get the current page URL."""
        return self.page.url

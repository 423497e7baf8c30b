from playwright.sync_api import Error as PlaywrightError, sync_playwright

from ..application.certificates import IImageRenderer, ImageRenderError

VIEWPORT = {"width": 1200, "height": 1600}


class HeadlessImageRenderer(IImageRenderer):
    """Rasterises an HTML document with headless Chromium."""

    def __init__(self, timeout_ms: int = 30000, device_scale_factor: int = 2):
        self.timeout_ms = timeout_ms
        self.device_scale_factor = device_scale_factor

    def render(self, html: str) -> bytes:
        try:
            with sync_playwright() as pw:
                browser = pw.chromium.launch(
                    headless=True, args=["--no-sandbox", "--disable-setuid-sandbox"]
                )
                try:
                    page = browser.new_page(
                        viewport=VIEWPORT, device_scale_factor=self.device_scale_factor
                    )
                    page.set_content(html, wait_until="networkidle", timeout=self.timeout_ms)
                    return page.screenshot(type="png", full_page=True, omit_background=False)
                finally:
                    browser.close()
        except PlaywrightError as exc:
            raise ImageRenderError(str(exc)) from exc

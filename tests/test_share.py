"""
Share Tests - native share, clipboard fallback, and the copy indicator.

Run with: pytest tests/test_share.py -v
"""
from share import COPY_INDICATOR_MS, ShareService


URL = "https://example.test/story"


class TestShareService:
    """Best-effort sharing."""

    def test_native_share_used_when_available(self, scheduler):
        shared, copied = [], []
        service = ShareService(URL, scheduler, title="T", native_share=lambda t, u: shared.append((t, u)), clipboard=copied.append)

        assert service.share() is True
        assert shared == [("T", URL)]
        assert copied == []
        assert service.label == "Share Link"

    def test_falls_back_to_clipboard_without_native_share(self, scheduler):
        copied = []
        service = ShareService(URL, scheduler, clipboard=copied.append)

        assert service.label == "Copy Link"
        assert service.share() is True
        assert copied == [URL]
        assert service.copy_success is True

    def test_falls_back_when_native_share_fails(self, scheduler):
        copied = []

        def broken(title, url):
            raise RuntimeError("share sheet dismissed")

        service = ShareService(URL, scheduler, native_share=broken, clipboard=copied.append)

        assert service.share() is True
        assert copied == [URL]

    def test_indicator_clears_after_two_seconds(self, scheduler):
        service = ShareService(URL, scheduler, clipboard=lambda text: None)
        service.copy_link()

        scheduler.advance(COPY_INDICATOR_MS - 1)
        assert service.copy_success is True
        scheduler.advance(1)
        assert service.copy_success is False

    def test_repeat_copy_restarts_indicator(self, scheduler):
        service = ShareService(URL, scheduler, clipboard=lambda text: None)
        service.copy_link()
        scheduler.advance(1500)
        service.copy_link()
        scheduler.advance(1500)

        assert service.copy_success is True
        assert scheduler.pending == 1

    def test_total_failure_is_silent(self, scheduler):
        def broken_clipboard(text):
            raise OSError("no clipboard")

        service = ShareService(URL, scheduler, clipboard=broken_clipboard)

        assert service.share() is False
        assert service.copy_success is False
        assert scheduler.pending == 0

    def test_no_clipboard(self, scheduler):
        service = ShareService(URL, scheduler)

        assert service.copy_link() is False
        assert service.copy_success is False

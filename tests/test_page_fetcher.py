"""Tests for extraction.page_fetcher."""

from unittest.mock import MagicMock, patch

import requests

from extraction.page_fetcher import fetch_page_text, sanitize_html

HTML = """
<html>
  <head><style>body { color: red; }</style><script>var price = 1;</script></head>
  <body>
    <h1>Cement prices</h1>
    <p>Ordinary Portland   Cement:
       1850 EGP/ton</p>
    <noscript>enable js</noscript>
  </body>
</html>
"""


def _response(status=200, text=HTML, content_type="text/html; charset=utf-8"):
    resp = MagicMock()
    resp.status_code = status
    resp.text = text
    resp.headers = {"Content-Type": content_type}
    resp.apparent_encoding = "utf-8"
    return resp


class TestSanitizeHtml:
    """Tests for sanitize_html."""

    def test_strips_markup_scripts_and_styles(self):
        text = sanitize_html(HTML)

        assert "Cement prices" in text
        assert "Ordinary Portland Cement: 1850 EGP/ton" in text
        assert "var price" not in text
        assert "color: red" not in text
        assert "<" not in text

    def test_truncates(self):
        text = sanitize_html("<p>" + "a" * 50 + "</p>", max_chars=10)
        assert text == "a" * 10

    def test_empty(self):
        assert sanitize_html("") == ""


class TestFetchPageText:
    """Tests for fetch_page_text."""

    @patch("extraction.page_fetcher._get_session")
    def test_success(self, mock_session):
        mock_session.return_value.get.return_value = _response()
        assert "1850 EGP/ton" in fetch_page_text("https://example.com/cement")

    @patch("extraction.page_fetcher._get_session")
    def test_error_status_returns_empty(self, mock_session):
        mock_session.return_value.get.return_value = _response(status=404)
        assert fetch_page_text("https://example.com/missing") == ""

    @patch("extraction.page_fetcher._get_session")
    def test_network_error_returns_empty(self, mock_session):
        mock_session.return_value.get.side_effect = requests.Timeout("timed out")
        assert fetch_page_text("https://example.com/slow") == ""

    @patch("extraction.page_fetcher._get_session")
    def test_too_many_redirects_returns_empty(self, mock_session):
        mock_session.return_value.get.side_effect = requests.TooManyRedirects("loop")
        assert fetch_page_text("https://example.com/loop") == ""

    @patch("extraction.page_fetcher._get_session")
    def test_binary_content_returns_empty(self, mock_session):
        mock_session.return_value.get.return_value = _response(content_type="application/pdf")
        assert fetch_page_text("https://example.com/list.pdf") == ""

    def test_no_url(self):
        assert fetch_page_text("") == ""

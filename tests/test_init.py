from __future__ import annotations

import mdscrape


def test_public_exports_resolve() -> None:
    for name in mdscrape.__all__:
        assert hasattr(mdscrape, name), name


def test_package_converts_without_browser() -> None:
    root = mdscrape.parse_html("<h2>Title</h2>", "https://example.com/")
    assert mdscrape.element_to_markdown(root, "https://example.com/") == "## Title\n\n"

"""URL identity, same-domain filtering and output file naming."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

IGNORED_SCHEMES = ("javascript:", "mailto:")
DEFAULT_PORTS = {"http": "80", "https": "443"}


def _normalize_netloc(netloc: str, scheme: str) -> str:
    """Lowercase the host and drop the scheme's default port."""
    userinfo, at, host = netloc.rpartition("@")
    host = host.lower()
    default_port = DEFAULT_PORTS.get(scheme)
    if default_port and host.endswith(f":{default_port}"):
        host = host[: -len(default_port) - 1]
    return f"{userinfo}{at}{host}"


def normalize_url(url: str) -> str:
    """Return ``url`` without its fragment.

    The result is the identity key used for deduplication. The scheme and
    host are lowercased and default ports dropped. Anything without a scheme
    is returned unchanged, so this never raises.
    """
    try:
        parts = urlsplit(url)
        if not parts.scheme:
            return url
        scheme = parts.scheme.lower()
        if not parts.netloc:
            return urlunsplit((scheme, "", parts.path, parts.query, ""))
        return urlunsplit(
            (
                scheme,
                _normalize_netloc(parts.netloc, scheme),
                parts.path or "/",
                parts.query,
                "",
            )
        )
    except (ValueError, TypeError, AttributeError):
        return url


def _normalize_host(host: Optional[str]) -> str:
    """Normalize hostname by removing port and lowercasing."""
    if not host:
        return ""
    return host.split(":")[0].lower()


def is_followable(href: Optional[str]) -> bool:
    """True for non-empty hrefs that are not script or mail links."""
    return bool(href) and not href.startswith(IGNORED_SCHEMES)


def is_same_domain(href: str, base_url: str) -> bool:
    """Check whether ``href`` stays on the host of ``base_url``.

    Host-relative links (starting with ``/``) are always accepted.
    """
    if href.startswith("/"):
        return True
    try:
        base_host = _normalize_host(urlsplit(base_url).hostname)
        host = _normalize_host(urlsplit(urljoin(base_url, href)).hostname)
    except ValueError:
        return False
    return bool(base_host) and host == base_host


def resolve_url(href: str, base_url: str) -> str:
    """Resolve a possibly relative reference against the page address."""
    return urljoin(base_url, href.strip())


def with_proxy(url: str, proxy_url: Optional[str]) -> str:
    """Prefix ``url`` with a rewriting proxy such as ``https://corsproxy.io/?``."""
    if not proxy_url:
        return url
    return f"{proxy_url}{url}"


def url_to_filename(normalized_url: str) -> str:
    """Derive the Markdown file name for a page from its normalized URL.

    ``https://x.com/docs/intro`` becomes ``docs_intro.md`` and the site root
    becomes ``index.md``.
    """
    try:
        path = urlsplit(normalized_url).path
    except ValueError:
        path = ""
    name = path.replace("/", "_")
    if name.startswith("_"):
        name = name[1:]
    if not name:
        name = "index"
    if not name.endswith(".md"):
        name += ".md"
    return name


def screenshot_filename(markdown_filename: str) -> str:
    """Screenshot name sharing the page's base name."""
    base = markdown_filename[:-3] if markdown_filename.endswith(".md") else markdown_filename
    return f"{base}.png"

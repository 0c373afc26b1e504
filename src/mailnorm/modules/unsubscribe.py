"""
Unsubscribe Normalizer
Parses List-Unsubscribe and List-Unsubscribe-Post (RFC 2369 / RFC 8058)

The web candidate and the mailto candidate come from two independent scans
of the same token list. Presence of List-Unsubscribe-Post alone turns the
web candidate into a POST action; its value is passed through as the body.
"""

from typing import List, Optional
from urllib.parse import SplitResult, parse_qsl, unquote, urlsplit

from .email_data import Header, Unsubscribe, UnsubscribeEmail, UnsubscribePost


WEB_SCHEMES = ("http", "https")
MAILTO_SCHEME = "mailto"


def _parse_url(token: str) -> Optional[SplitResult]:
    """URL for one header token, None when it is not an absolute URL"""
    token = token.strip().lstrip("<").rstrip(">").strip()
    if not token:
        return None
    try:
        url = urlsplit(token)
    except ValueError:
        return None
    if not url.scheme:
        return None
    if url.scheme in WEB_SCHEMES and not url.netloc:
        return None
    return url


def _parse_mailto(url: SplitResult) -> UnsubscribeEmail:
    headers = [
        Header(name=name, value=value)
        for name, value in parse_qsl(url.query, keep_blank_values=True)
    ]
    return UnsubscribeEmail(email=unquote(url.path), headers=headers)


def parse_unsubscribe(
    list_unsubscribe: Optional[str],
    list_unsubscribe_post: Optional[str] = None,
) -> Unsubscribe:
    """
    Normalize unsubscribe headers into GET / POST / mailto variants

    Args:
        list_unsubscribe: Raw List-Unsubscribe value, e.g.
            "<https://x/unsub>, <mailto:a@b.com?subject=unsub>"
        list_unsubscribe_post: Raw List-Unsubscribe-Post value, or None when
            the header is absent

    Returns:
        Unsubscribe with at most one of get/post set; email set independently
    """
    if not list_unsubscribe or not list_unsubscribe.strip():
        return Unsubscribe()

    urls: List[SplitResult] = [
        url for url in map(_parse_url, list_unsubscribe.split(",")) if url is not None
    ]

    web = next((url for url in urls if url.scheme in WEB_SCHEMES), None)
    mailto = next((url for url in urls if url.scheme == MAILTO_SCHEME), None)

    get = None
    post = None
    if web is not None:
        if list_unsubscribe_post is not None:
            post = UnsubscribePost(url=web.geturl(), body=list_unsubscribe_post.strip())
        else:
            get = web.geturl()

    return Unsubscribe(
        get=get,
        post=post,
        email=_parse_mailto(mailto) if mailto is not None else None,
    )

"""Page URI rewriting for pagination links.

A UriTemplate writes a page number into a base URI, either as a query
parameter (query mode) or by replacing one path segment (segment mode).
Everything else in the base URI (scheme, authority, other query pairs,
fragment) is carried over verbatim.
"""

from dataclasses import dataclass
from urllib.parse import quote_plus, unquote_plus, urlsplit, urlunsplit


@dataclass(frozen=True)
class UriTemplate:
    """Base URI plus the rule for where the page number goes.

    Attributes:
        base_uri: URI the pager links are derived from.
        segment: 0 for query mode; N > 0 to replace the Nth path segment.
        page_selector: Query parameter name used in query mode.
        only: If set, query keys to keep; all others are dropped.
    """

    base_uri: str
    segment: int = 0
    page_selector: str = "page"
    only: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        if self.segment < 0:
            msg = f"segment must be >= 0, got {self.segment}"
            raise ValueError(msg)

    @property
    def is_segment_mode(self) -> bool:
        """True when the page number lives in the path."""
        return self.segment > 0

    def with_page(self, page: int) -> str:
        """Return the base URI rewritten to point at `page`.

        Args:
            page: Page number to write into the URI.

        Returns:
            URI string for that page.
        """
        parts = urlsplit(self.base_uri)
        path = parts.path

        if self.is_segment_mode:
            path = _replace_segment(path, self.segment, str(page))
            query = _filter_query(parts.query, self.only)
        else:
            query = _set_query_param(
                parts.query, self.page_selector, str(page), self.only
            )

        return urlunsplit((parts.scheme, parts.netloc, path, query, parts.fragment))


def _query_key(pair: str) -> str:
    return unquote_plus(pair.split("=", 1)[0])


def _filter_query(query: str, only: tuple[str, ...] | None) -> str:
    """Keep only allow-listed raw query pairs (all pairs when only is None)."""
    if only is None:
        return query
    kept = [pair for pair in query.split("&") if pair and _query_key(pair) in only]
    return "&".join(kept)


def _set_query_param(
    query: str,
    name: str,
    value: str,
    only: tuple[str, ...] | None,
) -> str:
    """Set `name=value` in a raw query string.

    An existing pair keeps its position; otherwise the pair is appended.
    Other pairs are not re-encoded.
    """
    out: list[str] = []
    encoded = f"{quote_plus(name)}={quote_plus(value)}"
    replaced = False

    for pair in query.split("&"):
        if not pair:
            continue
        key = _query_key(pair)
        if key == name:
            # Duplicate selectors collapse into the first position
            if not replaced:
                out.append(encoded)
                replaced = True
            continue
        if only is not None and key not in only:
            continue
        out.append(pair)

    if not replaced:
        out.append(encoded)
    return "&".join(out)


def _replace_segment(path: str, number: int, value: str) -> str:
    """Replace the 1-indexed path segment `number` with `value`.

    A number past the end appends `value` as the final segment.
    Leading and trailing slashes are preserved.
    """
    stripped = path.strip("/")
    segments = stripped.split("/") if stripped else []

    if number <= len(segments):
        segments[number - 1] = quote_plus(value)
    else:
        segments.append(quote_plus(value))

    rebuilt = "/".join(segments)
    if path.startswith("/") or not path:
        rebuilt = "/" + rebuilt
    if path.endswith("/") and stripped:
        rebuilt += "/"
    return rebuilt

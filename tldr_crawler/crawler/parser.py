"""
HTML querying for the crawl pipeline: CSS selection, link and text extraction.
"""

import logging
from typing import List, Tuple

from bs4 import BeautifulSoup, Tag

from .errors import ParseError


def clean_text(text: str) -> str:
    """Trim surrounding whitespace and turn every newline into a space."""
    if not text:
        return ""
    return text.strip().replace("\n", " ")


def resolve_link(base_url: str, link: str) -> str:
    """
    Make a link absolute against the page it was found on.

    Anything containing "://" is taken as already absolute. Everything else
    is joined onto the base URL with a single slash. This is intentionally
    simpler than ``urljoin``: query-only links, protocol-relative links
    (``//host/path``) and ``../`` links are not resolved correctly.
    """
    if "://" in link:
        return link
    base = base_url[:-1] if base_url.endswith("/") else base_url
    path = link[1:] if link.startswith("/") else link
    return f"{base}/{path}"


class ContentParser:
    """
    Thin wrapper around BeautifulSoup's CSS selection.

    Every public method parses the given HTML, so a parser instance holds no
    per-page state and can be shared by all workers.
    """

    def __init__(self, features: str = "lxml"):
        self.features = features
        self.logger = logging.getLogger(__name__)

    def select(self, html_content: str, selector: str) -> List[Tag]:
        """
        Return the elements matching ``selector`` in document order.

        Raises:
            ParseError: the body cannot be parsed or the selector is invalid
        """
        try:
            soup = BeautifulSoup(html_content, self.features)
            return soup.select(selector)
        except Exception as e:
            raise ParseError(f"could not parse response body: {e}") from e

    def extract_links(self, html_content: str, selector: str,
                      base_url: str) -> List[Tuple[str, str]]:
        """Return (absolute link, cleaned text) for every match carrying an href."""
        links = []
        for element in self.select(html_content, selector):
            href = element.get("href")
            if href is None:
                self.logger.debug(f"Skipping element without href on {base_url}: {element.name}")
                continue
            links.append((resolve_link(base_url, href), clean_text(element.get_text())))
        return links

    def extract_text(self, html_content: str, selector: str) -> str:
        """Concatenate the text of every match and clean the result."""
        elements = self.select(html_content, selector)
        return clean_text("".join(element.get_text() for element in elements))

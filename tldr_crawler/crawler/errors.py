"""
Exceptions raised by the crawl pipeline.
"""


class CrawlError(Exception):
    """Base exception for crawler failures."""
    pass


class ParseError(CrawlError):
    """Raised when a response body cannot be parsed or queried."""
    pass


class ChannelClosedError(CrawlError):
    """Raised on send to, or second close of, a closed channel."""
    pass


class CrawlAbortedError(CrawlError):
    """Fatal fetch or parse failure that stops the whole crawl."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason

"""
Crawler core components.
"""

from .channel import Channel
from .errors import CrawlError, ParseError, ChannelClosedError, CrawlAbortedError
from .fetcher import WebFetcher, FetchResult
from .parser import ContentParser, clean_text, resolve_link
from .scheduler import CrawlerScheduler, CrawlStats, Task, Result

__all__ = [
    'Channel',
    'CrawlError', 'ParseError', 'ChannelClosedError', 'CrawlAbortedError',
    'WebFetcher', 'FetchResult',
    'ContentParser', 'clean_text', 'resolve_link',
    'CrawlerScheduler', 'CrawlStats', 'Task', 'Result'
]

"""
Mapper for newsapi.org article payloads
"""

import re
from datetime import datetime
from typing import Any, Dict, Optional

import structlog

from ....exceptions import ParseError
from ....utils.datetime_utils import to_naive_utc, utc_now
from ..sources.base import RawArticle

logger = structlog.get_logger(__name__)

MIN_TITLE_LENGTH = 10

_FRACTION_RE = re.compile(r"\.\d+")


class NewsAPIMapper:
    """Maps newsapi.org ``articles[]`` items to RawArticle"""

    def map_article(self, raw_data: Dict[str, Any]) -> Optional[RawArticle]:
        """
        Map one provider item.

        Returns:
            RawArticle, or None when the item has no usable title or URL
        """
        if not isinstance(raw_data, dict):
            return None

        title = self._text(raw_data, "title")
        url = self._text(raw_data, "url")
        if title is None or url is None:
            return None

        source = raw_data.get("source") if isinstance(raw_data.get("source"), dict) else {}
        now = utc_now()

        published_raw = self._text(raw_data, "publishedAt")
        try:
            published_at = self.parse_published_at(published_raw) if published_raw else now
        except ParseError as e:
            logger.debug("Unparseable published date, using current time", value=published_raw, error=str(e))
            published_at = now

        return RawArticle(
            title=title,
            url=url,
            published_at=published_at,
            description=self._text(raw_data, "description"),
            content=self._text(raw_data, "content"),
            image_url=self._text(raw_data, "urlToImage"),
            source_name=self._text(source, "name"),
            source_url=self._text(source, "url"),
            cached_at=now,
        )

    def is_valid(self, article: Optional[RawArticle]) -> bool:
        if article is None:
            return False
        title = article.title or ""
        url = article.url or ""
        return (
            bool(title.strip())
            and bool(url.strip())
            and len(title) > MIN_TITLE_LENGTH
            and url.startswith("http")
        )

    @staticmethod
    def parse_published_at(value: str) -> datetime:
        """
        Parse ``2025-10-26T06:52:51Z`` or ``2025-10-26T06:52:51.000Z`` into
        naive UTC. Fractional seconds are dropped.

        Raises:
            ParseError: the value is not an ISO-8601 timestamp
        """
        cleaned = _FRACTION_RE.sub("", value.strip())
        if cleaned.endswith("Z"):
            cleaned = cleaned[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(cleaned)
        except ValueError as e:
            raise ParseError(f"Invalid published timestamp: {value!r}") from e

        return to_naive_utc(parsed)

    @staticmethod
    def _text(node: Dict[str, Any], field: str) -> Optional[str]:
        value = node.get(field)
        if value is None:
            return None
        return str(value)

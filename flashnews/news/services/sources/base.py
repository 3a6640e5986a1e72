"""
Base class for news providers
Clean, simple interface the cache service fetches through
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional


@dataclass
class RawArticle:
    """Article as delivered by a provider, before it is cached"""
    title: str
    url: str
    published_at: datetime
    description: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    source_name: Optional[str] = None
    source_url: Optional[str] = None
    cached_at: Optional[datetime] = None


class NewsFetcher(ABC):
    """Fetches candidate articles from a remote source"""

    name: str = "news provider"

    @abstractmethod
    def fetch(self, category: Optional[str] = None, country_code: Optional[str] = None,
              limit: int = 20) -> List[RawArticle]:
        """
        Fetch up to ``limit`` articles.

        Args:
            category: provider category, or None for no category hint
            country_code: two-letter lowercase region code, or None

        Raises:
            FetchError: provider unreachable or answered with a non-success status
        """
        pass

    def close(self) -> None:
        pass

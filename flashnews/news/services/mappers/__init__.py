"""
News provider mappers
Turn raw provider payloads into RawArticle objects
"""

from .newsapi_mapper import NewsAPIMapper

__all__ = [
    'NewsAPIMapper'
]

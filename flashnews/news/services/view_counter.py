"""
Fire-and-forget view counting on a small fixed worker pool.
"""

from concurrent.futures import Future, ThreadPoolExecutor

import structlog

from ..repositories.article_repository import ArticleRepository

logger = structlog.get_logger(__name__)


class ViewCountDispatcher:

    def __init__(self, article_repository: ArticleRepository, max_workers: int = 5):
        self.article_repository = article_repository
        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="view-count")
        self._shutdown = False

    def dispatch(self, article_id: int) -> None:
        """Queue an increment. Never blocks on it and never raises."""
        if self._shutdown:
            logger.warning("View count dispatcher is shut down, dropping increment", article_id=article_id)
            return

        try:
            future = self.executor.submit(self.article_repository.increment_view_count, article_id)
        except RuntimeError as e:
            logger.warning("Could not queue view count increment", article_id=article_id, error=str(e))
            return

        future.add_done_callback(lambda f: self._log_outcome(f, article_id))

    def shutdown(self, wait: bool = True) -> None:
        if self._shutdown:
            return
        self._shutdown = True
        self.executor.shutdown(wait=wait)
        logger.info("View count workers shut down")

    @staticmethod
    def _log_outcome(future: Future, article_id: int) -> None:
        error = future.exception()
        if error is not None:
            logger.warning("View count increment failed", article_id=article_id, error=str(error))
        elif not future.result():
            logger.debug("View count increment matched no article", article_id=article_id)

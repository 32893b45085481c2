"""
Search engine for keyfind.

The engine wires the tools together for one invocation:

1. the root is validated once (an invalid root ends the search with
   ``PATH_NOT_FOUND`` and no progress events),
2. the walker enumerates every candidate for the mode up front,
3. the mode's matcher maps each candidate to its match records,
4. the per-candidate record lists are flattened in traversal order.

No state is shared between invocations.
"""

import time
import threading
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from .models.config import SearchConfig
from .models.search_request import SearchRequest
from .models.search_results import MatchRecord, SearchOutcome, SearchStatus
from .tools.fs_walker import Candidate, FSWalker
from .tools.matcher import CandidateResult, Matcher, create_matcher
from .tools.path_validator import PathNotFoundError, validate_root
from .tools.progress import ProgressLike, ProgressTracker, as_reporter


logger = logging.getLogger(__name__)


class CancellationToken:
    """Best-effort cancellation flag shared between a caller and a search."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request that the search stop as soon as possible."""
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()


class SearchEngine:
    """
    Runs keyword searches over a directory tree.

    A single engine may be reused for many requests; each call to
    :meth:`search` builds its own walker, matcher and progress tracker.
    """

    def __init__(self, config: Optional[SearchConfig] = None):
        """
        Initialize the search engine.

        Args:
            config: Configuration for traversal, matching and progress
        """
        self.config = config or SearchConfig()

    def search(
        self,
        request: SearchRequest,
        progress: ProgressLike = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> SearchOutcome:
        """
        Execute a search request.

        Args:
            request: What to search for and where
            progress: Reporter or callable receiving ProgressEvent objects
            cancel_token: Optional token to stop the search early

        Returns:
            SearchOutcome whose ``matches`` is the ordered record sequence
        """
        start_time = time.monotonic()
        reporter = as_reporter(progress)

        try:
            root = validate_root(request.path)
        except PathNotFoundError as e:
            logger.warning(str(e))
            return self._outcome(request, SearchStatus.PATH_NOT_FOUND, start_time)

        logger.info(f"Starting search: {request}")

        walker = FSWalker(self.config)
        should_stop = (lambda: cancel_token.is_cancelled) if cancel_token else None
        candidates = walker.enumerate_candidates(
            root,
            request.mode,
            request.get_extension_filters(),
            should_stop=should_stop,
        )
        skipped = walker.get_errors()

        tracker = ProgressTracker(
            len(candidates),
            reporter,
            spinner_every=self.config.progress.spinner_every,
            glyphs=self.config.progress.glyphs,
        )

        if cancel_token is not None and cancel_token.is_cancelled:
            tracker.cancel()
            return self._outcome(request, SearchStatus.CANCELLED, start_time,
                                 total=len(candidates), skipped=skipped)

        if not candidates:
            logger.info(f"No candidates to search under {root}")
            tracker.finish()
            return self._outcome(request, SearchStatus.NO_CANDIDATES, start_time, skipped=skipped)

        matcher = create_matcher(request.mode, self.config)
        results = self._match_all(matcher, candidates, request.keywords, tracker, cancel_token)

        matches: List[MatchRecord] = []
        for result in results:
            matches.extend(result.records)
            if result.skipped:
                skipped.append(result.skipped)

        if len(results) < len(candidates):
            tracker.cancel()
            status = SearchStatus.CANCELLED
            logger.info(f"Search cancelled after {len(results)} of {len(candidates)} candidates")
        else:
            tracker.finish()
            status = SearchStatus.COMPLETED

        outcome = self._outcome(request, status, start_time, matches=matches,
                                total=len(candidates), skipped=skipped)
        logger.info(f"Search finished: {outcome}")
        return outcome

    def _match_all(
        self,
        matcher: Matcher,
        candidates: List[Candidate],
        keywords: List[str],
        tracker: ProgressTracker,
        cancel_token: Optional[CancellationToken],
    ) -> List[CandidateResult]:
        """
        Map every candidate to its CandidateResult, preserving candidate order.

        Stops at the first candidate reached after cancellation, so the
        returned list is always a prefix of the full result list.
        """

        aborted = threading.Event()

        def run(candidate: Candidate) -> Optional[CandidateResult]:
            if aborted.is_set() or (cancel_token is not None and cancel_token.is_cancelled):
                return None
            result = matcher.match_candidate(candidate, keywords)
            tracker.advance()
            return result

        results: List[CandidateResult] = []
        workers = self.config.limits.max_workers

        if workers > 1 and len(candidates) > 1:
            # Executor.map yields in submission order, whatever finishes first
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="keyfind") as executor:
                try:
                    for result in executor.map(run, candidates):
                        if result is None:
                            break
                        results.append(result)
                except BaseException:
                    # KeyboardInterrupt included; the executor's exit joins the workers
                    aborted.set()
                    executor.shutdown(wait=False, cancel_futures=True)
                    raise
        else:
            for candidate in candidates:
                result = run(candidate)
                if result is None:
                    break
                results.append(result)

        return results

    @staticmethod
    def _outcome(
        request: SearchRequest,
        status: SearchStatus,
        start_time: float,
        matches: Optional[List[MatchRecord]] = None,
        total: int = 0,
        skipped: Optional[List[str]] = None,
    ) -> SearchOutcome:
        return SearchOutcome(
            request=request,
            status=status,
            matches=matches or [],
            total_candidates=total,
            skipped=skipped or [],
            execution_time=time.monotonic() - start_time,
        )


def search(
    request: SearchRequest,
    config: Optional[SearchConfig] = None,
    progress: ProgressLike = None,
    cancel_token: Optional[CancellationToken] = None,
) -> SearchOutcome:
    """
    Convenience function to run a single search.

    Args:
        request: What to search for and where
        config: Optional configuration (defaults apply when omitted)
        progress: Reporter or callable receiving ProgressEvent objects
        cancel_token: Optional token to stop the search early

    Returns:
        SearchOutcome for the request
    """
    engine = SearchEngine(config)
    return engine.search(request, progress=progress, cancel_token=cancel_token)

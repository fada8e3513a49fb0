'''
hooks for reporting progress of changelog-generation

Resolution- and assembly-logic does not log by itself; instead, it reports to an `Observer`. The
default `LoggingObserver` forwards to the `changelog` logger. Tests (or other callers) may pass
their own implementation (e.g. to collect events).
'''
import logging

import changelog.model as cm


logger = logging.getLogger(__name__)


class Observer:
    '''
    no-op base-class; subclasses override the hooks they are interested in
    '''
    def page_fetched(self, kind: str, page: int, count: int):
        pass

    def pagination_truncated(self, kind: str, pages: int):
        pass

    def branch_resolved(self, branch: str, is_default: bool):
        pass

    def tag_resolved(self, tag_name: str, commit_sha: str):
        pass

    def release_located(self, role: str, tag_name: str):
        pass

    def commit_range_resolved(self, idx_latest: int, idx_previous: int):
        pass

    def pull_request_included(self, pull_request: cm.PullRequest):
        pass

    def pull_request_skipped(self, pull_request: cm.PullRequest, reason: str):
        pass

    def prior_changelog_unavailable(self, path: str, ref: str, error: Exception):
        pass


class LoggingObserver(Observer):
    def __init__(self, logger: logging.Logger=logger):
        self.logger = logger

    def page_fetched(self, kind: str, page: int, count: int):
        self.logger.debug(f'fetched {count} {kind} from {page=}')

    def pagination_truncated(self, kind: str, pages: int):
        self.logger.warning(f'stopped listing {kind} after {pages} page(s) (max. page-count reached)')

    def branch_resolved(self, branch: str, is_default: bool):
        if is_default:
            self.logger.info(f'using default branch {branch}')
        else:
            self.logger.info(f'using configured branch {branch}')

    def tag_resolved(self, tag_name: str, commit_sha: str):
        self.logger.info(f'{tag_name=} points to {commit_sha}')

    def release_located(self, role: str, tag_name: str):
        self.logger.info(f'{role} release: {tag_name}')

    def commit_range_resolved(self, idx_latest: int, idx_previous: int):
        self.logger.info(
            f'{idx_previous - idx_latest} commit(s) between releases ({idx_latest=}, {idx_previous=})'
        )

    def pull_request_included(self, pull_request: cm.PullRequest):
        self.logger.info(f'including {pull_request.url}: {pull_request.title}')

    def pull_request_skipped(self, pull_request: cm.PullRequest, reason: str):
        self.logger.debug(f'skipping {pull_request.url} ({reason})')

    def prior_changelog_unavailable(self, path: str, ref: str, error: Exception):
        self.logger.warning(f'could not read {path=} at {ref=} - will not append it: {error}')

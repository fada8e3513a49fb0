import functools

import changelog.model as cm
import changelog.observe as co
import changelog.paginate as cp
import github.client_async as gca


def _parse_pull_request(raw: dict) -> cm.PullRequest | None:
    # closed, but not merged
    if not raw.get('merged_at') or not raw.get('merge_commit_sha'):
        return None

    return cm.PullRequest(
        url=raw['html_url'],
        title=raw['title'],
        commit_sha=raw['merge_commit_sha'],
        number=raw.get('number'),
    )


def commit_window(
    client: gca.Client,
    branch: str,
    page_size: int=cm.DEFAULT_PAGE_SIZE,
    max_pages: int=cm.DEFAULT_MAX_PAGES,
    observer: co.Observer=None,
) -> cp.PaginatedCache[str]:
    '''
    returns a (lazily-filled) cache of commit-digests on given branch, newest first
    '''
    return cp.PaginatedCache(
        kind='commits',
        fetch_page=functools.partial(client.commits, branch),
        parse=lambda raw: raw['sha'],
        key=lambda sha: sha,
        page_size=page_size,
        max_pages=max_pages,
        observer=observer,
    )


def pull_request_window(
    client: gca.Client,
    branch: str,
    page_size: int=cm.DEFAULT_PAGE_SIZE,
    max_pages: int=cm.DEFAULT_MAX_PAGES,
    observer: co.Observer=None,
) -> cp.PaginatedCache[cm.PullRequest]:
    '''
    returns a (lazily-filled) cache of merged pull-requests targeting given branch
    '''
    return cp.PaginatedCache(
        kind='pull-requests',
        fetch_page=functools.partial(client.pulls, branch),
        parse=_parse_pull_request,
        page_size=page_size,
        max_pages=max_pages,
        observer=observer,
    )


class ChangelogAssembler:
    '''
    collects the titles of all pull-requests merged between two releases.

    A pull-request is considered part of the latest release if its merge-commit is contained in
    the half-open range [idx_latest, idx_previous) of the commit-window, i.e. the commit tagged for
    the latest release is included, whereas the commit tagged for the previous release is not.
    '''
    def __init__(
        self,
        client: gca.Client,
        commits: cp.PaginatedCache[str],
        pull_requests: cp.PaginatedCache[cm.PullRequest],
        title: str,
        prefix: str,
        changelog_path: str=cm.DEFAULT_CHANGELOG_PATH,
        observer: co.Observer=None,
    ):
        self.client = client
        self.commits = commits
        self.pull_requests = pull_requests
        self.title = title
        self.prefix = prefix
        self.changelog_path = changelog_path
        self.observer = observer or co.LoggingObserver()

    async def commit_index(self, commit_sha: str) -> int:
        try:
            return await self.commits.ensure_contains(commit_sha)
        except cm.ExhaustedPagination as ep:
            raise cm.CommitNotReachable(
                f'{commit_sha=} is not reachable on branch ({ep})'
            ) from ep

    async def _pull_request_commit_index(self, pull_request: cm.PullRequest) -> int | None:
        if (idx := self.commits.lookup(pull_request.commit_sha)) is not None:
            return idx

        try:
            return await self.commit_index(pull_request.commit_sha)
        except cm.CommitNotReachable:
            return None

    async def collect_lines(
        self,
        idx_latest: int,
        idx_previous: int,
    ) -> list[str]:
        '''
        scans pull-requests page by page. All pull-requests of a fetched page are considered (no
        assumption is made about listing-order correlating w/ merge-order). Scanning stops after
        the first page not containing any pull-request merged after the previous release.
        '''
        lines = []

        async for page in self.pull_requests.iter_pages():
            newer_than_previous_release = False

            for pull_request in page:
                idx = await self._pull_request_commit_index(pull_request)

                if idx is None:
                    self.observer.pull_request_skipped(
                        pull_request=pull_request,
                        reason='merge-commit not reachable on branch',
                    )
                    continue

                if idx < idx_previous:
                    newer_than_previous_release = True

                if idx < idx_latest:
                    self.observer.pull_request_skipped(
                        pull_request=pull_request,
                        reason='merged after latest release',
                    )
                elif idx >= idx_previous:
                    self.observer.pull_request_skipped(
                        pull_request=pull_request,
                        reason='merged before previous release',
                    )
                else:
                    lines.append(f'{self.prefix} {pull_request.title}')
                    self.observer.pull_request_included(pull_request=pull_request)

            if page and not newer_than_previous_release:
                break

        return lines

    async def prior_content(self, ref: str) -> str:
        try:
            return await self.client.file_content(path=self.changelog_path, ref=ref)
        except gca.FileFetchError as ffe:
            self.observer.prior_changelog_unavailable(
                path=self.changelog_path,
                ref=ref,
                error=ffe,
            )
            return ''

    async def assemble(
        self,
        latest_tag_sha: str,
        previous_tag_sha: str,
    ) -> cm.Changelog:
        idx_latest = await self.commit_index(latest_tag_sha)
        idx_previous = await self.commit_index(previous_tag_sha)

        if idx_latest >= idx_previous:
            raise cm.InvalidCommitRange(
                f'{latest_tag_sha=} (at {idx_latest}) is not more recent than '
                f'{previous_tag_sha=} (at {idx_previous})'
            )
        self.observer.commit_range_resolved(idx_latest=idx_latest, idx_previous=idx_previous)

        lines = await self.collect_lines(
            idx_latest=idx_latest,
            idx_previous=idx_previous,
        )

        return cm.Changelog(
            title=self.title,
            lines=tuple(lines),
            prior_content=await self.prior_content(ref=previous_tag_sha),
        )

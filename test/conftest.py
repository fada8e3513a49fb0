import collections

import pytest

import github.client_async as gca


class FakeGithub:
    '''
    in-memory stand-in for github.client_async.Client. Listings are paginated the same way
    github-api does (1-based pages, partial last page). Requested pages are recorded in `requests`.
    '''
    def __init__(
        self,
        default_branch: str='master',
        latest_release: str | None=None,
        releases: list=(),
        tags: list[tuple[str, str]]=(),
        commits: list[str]=(),
        pulls: list[dict]=(),
        files: dict[tuple[str, str], str]=None,
    ):
        self._default_branch = default_branch
        self._latest_release = latest_release
        self._releases = [
            release if isinstance(release, dict) else {'tag_name': release, 'draft': False}
            for release in releases
        ]
        self._tags = [
            {'name': name, 'commit': {'sha': sha}} for name, sha in tags
        ]
        self._commits = [{'sha': sha} for sha in commits]
        self._pulls = list(pulls)
        self._files = files or {}

        self.requests = collections.defaultdict(list)

    @staticmethod
    def pull(
        title: str,
        commit_sha: str,
        number: int=1,
        merged: bool=True,
    ) -> dict:
        return {
            'number': number,
            'html_url': f'https://github.com/o/r/pull/{number}',
            'title': title,
            'merged_at': '2024-01-01T00:00:00Z' if merged else None,
            'merge_commit_sha': commit_sha,
        }

    def _page(self, kind: str, elements: list, page: int, per_page: int) -> list:
        self.requests[kind].append(page)
        return elements[(page - 1) * per_page:page * per_page]

    async def default_branch(self) -> str:
        self.requests['repository'].append(None)
        return self._default_branch

    async def latest_release(self) -> dict:
        self.requests['latest_release'].append(None)
        if not self._latest_release:
            raise gca.RemoteApiError('Not Found', status=404)
        return {'tag_name': self._latest_release}

    async def releases(self, page: int, per_page: int) -> list[dict]:
        return self._page('releases', self._releases, page, per_page)

    async def tags(self, page: int, per_page: int) -> list[dict]:
        return self._page('tags', self._tags, page, per_page)

    async def commits(self, sha: str, page: int, per_page: int) -> list[dict]:
        return self._page(f'commits:{sha}', self._commits, page, per_page)

    async def pulls(self, base: str, page: int, per_page: int, state: str='closed') -> list[dict]:
        return self._page(f'pulls:{base}', self._pulls, page, per_page)

    async def file_content(self, path: str, ref: str) -> str:
        self.requests['file_content'].append((path, ref))
        try:
            return self._files[(path, ref)]
        except KeyError:
            raise gca.FileFetchError(f'{path=} not found at {ref=}', status=404)


class RecordingObserver:
    def __init__(self):
        self.events = []

    def __getattr__(self, name):
        def record(**kwargs):
            self.events.append((name, kwargs))
        return record


@pytest.fixture
def fake_github():
    return FakeGithub


@pytest.fixture
def recording_observer():
    return RecordingObserver()

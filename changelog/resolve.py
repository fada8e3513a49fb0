'''
resolution of branch, release-tags and tag-commits
'''
import changelog.model as cm
import changelog.observe as co
import changelog.paginate as cp
import github.client_async as gca


class BranchResolver:
    '''
    resolves the branch to read commits and pull-requests from. If no override is configured,
    the repository's default-branch is retrieved (once).
    '''
    def __init__(
        self,
        client: gca.Client,
        branch: str | None=None,
        observer: co.Observer=None,
    ):
        self.client = client
        self._override = branch
        self._branch = None
        self.observer = observer or co.LoggingObserver()

    async def branch(self) -> str:
        if self._branch:
            return self._branch

        if self._override:
            self._branch = self._override
            self.observer.branch_resolved(branch=self._branch, is_default=False)
        else:
            self._branch = await self.client.default_branch()
            self.observer.branch_resolved(branch=self._branch, is_default=True)

        return self._branch


def _parse_tag(raw: dict) -> cm.Tag:
    return cm.Tag(
        name=raw['name'],
        commit_sha=raw['commit']['sha'],
    )


def _parse_release(raw: dict) -> cm.Release:
    return cm.Release(
        tag_name=raw['tag_name'],
        name=raw.get('name'),
        draft=raw.get('draft', False),
        prerelease=raw.get('prerelease', False),
    )


class TagResolver:
    def __init__(
        self,
        client: gca.Client,
        page_size: int=cm.DEFAULT_PAGE_SIZE,
        max_pages: int=cm.DEFAULT_MAX_PAGES,
        observer: co.Observer=None,
    ):
        self.observer = observer or co.LoggingObserver()
        self.tags = cp.PaginatedCache(
            kind='tags',
            fetch_page=client.tags,
            parse=_parse_tag,
            key=lambda tag: tag.name,
            page_size=page_size,
            max_pages=max_pages,
            observer=self.observer,
        )

    async def resolve_tag(self, tag_name: str) -> str:
        '''
        returns the commit-digest the given tag points to
        '''
        try:
            idx = await self.tags.ensure_contains(tag_name)
        except cm.ExhaustedPagination as ep:
            raise cm.TagNotFound(f'did not find {tag_name=} ({ep})') from ep

        commit_sha = self.tags.items[idx].commit_sha
        self.observer.tag_resolved(tag_name=tag_name, commit_sha=commit_sha)

        return commit_sha


class ReleaseLocator:
    def __init__(
        self,
        client: gca.Client,
        tag_resolver: TagResolver,
        page_size: int=cm.DEFAULT_PAGE_SIZE,
        max_pages: int=cm.DEFAULT_MAX_PAGES,
        observer: co.Observer=None,
    ):
        self.client = client
        self.tag_resolver = tag_resolver
        self.observer = observer or co.LoggingObserver()
        self.releases = cp.PaginatedCache(
            kind='releases',
            fetch_page=client.releases,
            parse=_parse_release,
            page_size=page_size,
            max_pages=max_pages,
            observer=self.observer,
        )

    async def latest_release(self) -> str:
        '''
        returns the tag-name of the latest release
        '''
        try:
            release = _parse_release(await self.client.latest_release())
        except gca.RemoteApiError as rae:
            if rae.status == 404:
                raise cm.ReleaseNotFound('repository has no (published) release') from rae
            raise

        self.observer.release_located(role='latest', tag_name=release.tag_name)
        return release.tag_name

    async def previous_release(
        self,
        latest_tag_sha: str,
        latest_tag_name: str | None=None,
    ) -> str:
        '''
        returns the tag-name of the first release (in github's listing-order, i.e. most recent
        first) whose tag points to a different commit than `latest_tag_sha`. Draft-releases are
        ignored, as they have no tag (yet).

        If `latest_tag_name` is passed, releases listed before it are skipped. Those are newer than
        the latest release (e.g. prereleases, which github does not consider for the latest
        release).
        '''
        seen_latest = latest_tag_name is None

        async for release in self.releases:
            if not seen_latest:
                seen_latest = release.tag_name == latest_tag_name
                continue

            if release.draft:
                continue

            commit_sha = await self.tag_resolver.resolve_tag(release.tag_name)
            if commit_sha == latest_tag_sha:
                continue

            self.observer.release_located(role='previous', tag_name=release.tag_name)
            return release.tag_name

        raise cm.NoPreviousRelease(
            f'no release found pointing to a commit other than {latest_tag_sha=} '
            f'(searched {len(self.releases.items)} release(s))'
        )

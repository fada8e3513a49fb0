import changelog.assemble as ca
import changelog.model as cm
import changelog.observe as co
import changelog.resolve as cr
import github
import github.client_async as gca


class ChangelogGenerator:
    '''
    generates the changelog for the latest release of a repository, i.e. the titles of all
    pull-requests merged between the previous release and the latest one.

    An instance holds (lazily filled) caches of tags, releases, commits and pull-requests, and is
    intended to be used for a single run.
    '''
    def __init__(
        self,
        cfg: cm.ChangelogCfg,
        client: gca.Client,
        observer: co.Observer=None,
    ):
        self.cfg = cfg
        self.client = client
        self.observer = observer or co.LoggingObserver()

        self.branch_resolver = cr.BranchResolver(
            client=client,
            branch=cfg.branch,
            observer=self.observer,
        )
        self.tag_resolver = cr.TagResolver(
            client=client,
            page_size=cfg.page_size,
            max_pages=cfg.max_pages,
            observer=self.observer,
        )
        self.release_locator = cr.ReleaseLocator(
            client=client,
            tag_resolver=self.tag_resolver,
            page_size=cfg.page_size,
            max_pages=cfg.max_pages,
            observer=self.observer,
        )

    async def assembler(self) -> ca.ChangelogAssembler:
        branch = await self.branch_resolver.branch()

        window_kwargs = {
            'client': self.client,
            'branch': branch,
            'page_size': self.cfg.page_size,
            'max_pages': self.cfg.max_pages,
            'observer': self.observer,
        }

        return ca.ChangelogAssembler(
            client=self.client,
            commits=ca.commit_window(**window_kwargs),
            pull_requests=ca.pull_request_window(**window_kwargs),
            title=self.cfg.title,
            prefix=self.cfg.prefix,
            changelog_path=self.cfg.changelog_path,
            observer=self.observer,
        )

    async def generate(self) -> cm.Changelog:
        assembler = await self.assembler()

        latest_tag = await self.release_locator.latest_release()
        latest_tag_sha = await self.tag_resolver.resolve_tag(latest_tag)

        previous_tag = await self.release_locator.previous_release(
            latest_tag_sha=latest_tag_sha,
            latest_tag_name=latest_tag,
        )
        previous_tag_sha = await self.tag_resolver.resolve_tag(previous_tag)

        return await assembler.assemble(
            latest_tag_sha=latest_tag_sha,
            previous_tag_sha=previous_tag_sha,
        )


async def generate_changelog(
    cfg: cm.ChangelogCfg,
    client: gca.Client=None,
    observer: co.Observer=None,
) -> cm.Changelog:
    '''
    convenience function running a single changelog-generation. If no client is passed, one is
    created (and closed afterwards) for the configured repository on github.com (or the
    GitHub-Enterprise instance configured via GITHUB_SERVER_URL / GITHUB_API_URL).
    '''
    if client:
        return await ChangelogGenerator(cfg=cfg, client=client, observer=observer).generate()

    async with github.github_api(
        repo_url=_repo_url(cfg),
        token=cfg.github_token,
    ) as client:
        return await ChangelogGenerator(cfg=cfg, client=client, observer=observer).generate()


def _repo_url(cfg: cm.ChangelogCfg) -> str:
    host = cfg.host or github.server_host()
    return f'{host}/{cfg.owner}/{cfg.repo}'

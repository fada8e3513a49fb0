import dataclasses
import typing

import dacite


DEFAULT_PAGE_SIZE = 100 # max. page-size accepted by github-api
DEFAULT_MAX_PAGES = 100
DEFAULT_CHANGELOG_PATH = 'CHANGELOG.md'


class ChangelogError(Exception):
    pass


class NotFound(ChangelogError):
    pass


class TagNotFound(NotFound):
    pass


class ReleaseNotFound(NotFound):
    pass


class NoPreviousRelease(NotFound):
    pass


class CommitNotReachable(NotFound):
    pass


class ExhaustedPagination(ChangelogError):
    '''
    raised if a search through a paginated listing ran off the end of the listing (or exceeded
    the configured maximum amount of pages) without finding what was searched for
    '''
    def __init__(self, kind: str, pages: int):
        self.kind = kind
        self.pages = pages
        super().__init__(f'{kind}: searched {pages} page(s) without a match')


class InvalidCommitRange(ChangelogError):
    pass


@dataclasses.dataclass(frozen=True)
class Tag:
    name: str
    commit_sha: str


@dataclasses.dataclass(frozen=True)
class Release:
    tag_name: str
    name: str | None = None
    draft: bool = False
    prerelease: bool = False


@dataclasses.dataclass(frozen=True)
class PullRequest:
    url: str
    title: str
    commit_sha: str
    number: int | None = None


@dataclasses.dataclass(frozen=True, kw_only=True)
class ChangelogCfg:
    '''
    configuration for a single changelog-generation run

    `branch` overwrites the branch commits and pull-requests are read from (defaults to the
    repository's default branch). `host` is the github-host (defaults to GITHUB_SERVER_URL, or
    github.com). `changelog_path` is the (repository-relative) path of the changelog file whose
    contents (as of the previous release) are appended to generated entries.
    '''
    title: str
    prefix: str
    github_token: str
    owner: str
    repo: str
    branch: str | None = None
    host: str | None = None
    changelog_path: str = DEFAULT_CHANGELOG_PATH
    page_size: int = DEFAULT_PAGE_SIZE
    max_pages: int = DEFAULT_MAX_PAGES

    def __post_init__(self):
        for name in ('github_token', 'owner', 'repo'):
            if not getattr(self, name):
                raise ValueError(f'{name} must not be empty')
        if not 1 <= self.page_size <= DEFAULT_PAGE_SIZE:
            raise ValueError(f'{self.page_size=} must be within 1..{DEFAULT_PAGE_SIZE}')
        if self.max_pages < 1:
            raise ValueError(f'{self.max_pages=} must be positive')

    @staticmethod
    def from_dict(raw: dict) -> typing.Self:
        return dacite.from_dict(
            data_class=ChangelogCfg,
            data=raw,
            config=dacite.Config(
                strict=True,
            ),
        )


@dataclasses.dataclass(frozen=True)
class Changelog:
    title: str
    lines: tuple[str, ...] = ()
    prior_content: str = ''

    @property
    def is_empty(self) -> bool:
        '''
        whether no entries were generated for the release; appended prior contents are not
        considered
        '''
        return not self.lines

    @property
    def body(self) -> str:
        return ''.join(f'{line}\n' for line in self.lines) + self.prior_content

    @property
    def text(self) -> str:
        return f'{self.title}\n{self.body}'

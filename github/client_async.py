'''
minimalistic async client for the parts of github's REST-API required for generating changelogs

only read-operations against a single repository are offered. Listing-operations return raw
(json-decoded) pages; callers are responsible for pagination (see `changelog.paginate`).
'''
import base64
import binascii
import logging
import urllib.parse

import aiohttp
import aiohttp.client_exceptions


logger = logging.getLogger(__name__)

github_request_logger = logging.getLogger('github.client.request_logger')
github_request_logger.setLevel(logging.DEBUG)

DEFAULT_API_URL = 'https://api.github.com'
USER_AGENT = 'changelog-from-tags (python3; aiohttp)'


class RemoteApiError(Exception):
    '''
    raised for unsuccessful responses (and transport-errors) when talking to github-api
    '''
    def __init__(self, msg: str, status: int | None=None, url: str | None=None):
        self.status = status
        self.url = url
        super().__init__(msg)


class FileFetchError(RemoteApiError):
    pass


class Client:
    def __init__(
        self,
        owner: str,
        repo: str,
        token: str=None,
        api_url: str=DEFAULT_API_URL,
        session: aiohttp.ClientSession=None,
        timeout_seconds: int=None,
    ):
        '''
        @param owner <str>
            org- or user-name owning the repository
        @param repo <str>
        @param token <str>
            github-auth-token (anonymous access if not passed; expect tight rate-limits)
        @param api_url <str>
            base-url of github-api (differs for GitHub-Enterprise instances)
        @param session <ClientSession>
            if not passed, a session is created (and closed by `close`)
        @param timeout_seconds <int>
        '''
        self.owner = owner
        self.repo = repo
        self.token = token
        self.api_url = api_url.rstrip('/')
        self._session = session
        self._owns_session = session is None

        if timeout_seconds:
            timeout_seconds = int(timeout_seconds)
        self.timeout_seconds = timeout_seconds or 121

    @property
    def session(self) -> aiohttp.ClientSession:
        # aiohttp requires sessions to be created from within a running event-loop
        if not self._session:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self):
        if self._owns_session and self._session:
            await self._session.close()
        self._session = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    def _repo_url(self, *parts: str) -> str:
        return '/'.join((self.api_url, 'repos', self.owner, self.repo, *parts))

    def _headers(self) -> dict:
        headers = {
            'Accept': 'application/vnd.github+json',
            'User-Agent': USER_AGENT,
            'X-GitHub-Api-Version': '2022-11-28',
        }
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    async def _request(
        self,
        url: str,
        params: dict=None,
        method: str='GET',
    ):
        github_request_logger.debug(
            msg=f'github request sent {method=} {url=} {params=}',
        )

        try:
            async with self.session.request(
                method=method,
                url=url,
                params=params,
                headers=self._headers(),
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ) as res:
                if not res.ok:
                    text = await res.text()
                    logger.warning(f'rq against {url=} failed {res.status=} {res.reason=} {text=}')
                    raise RemoteApiError(
                        f'{method} {url} failed: {res.status} {res.reason}',
                        status=res.status,
                        url=url,
                    )
                return await res.json()
        except (
            aiohttp.client_exceptions.ClientError,
            TimeoutError,
        ) as e:
            raise RemoteApiError(f'{method} {url} failed: {e!r}', url=url) from e

    async def repository(self) -> dict:
        return await self._request(self._repo_url())

    async def default_branch(self) -> str:
        return (await self.repository())['default_branch']

    async def latest_release(self) -> dict:
        '''
        returns the most recent non-draft, non-prerelease release (as determined by github)
        '''
        return await self._request(self._repo_url('releases', 'latest'))

    async def releases(self, page: int, per_page: int) -> list[dict]:
        return await self._request(
            self._repo_url('releases'),
            params={'page': page, 'per_page': per_page},
        )

    async def tags(self, page: int, per_page: int) -> list[dict]:
        return await self._request(
            self._repo_url('tags'),
            params={'page': page, 'per_page': per_page},
        )

    async def commits(self, sha: str, page: int, per_page: int) -> list[dict]:
        '''
        lists commits reachable from given ref (typically a branch-name), newest first
        '''
        return await self._request(
            self._repo_url('commits'),
            params={'sha': sha, 'page': page, 'per_page': per_page},
        )

    async def pulls(
        self,
        base: str,
        page: int,
        per_page: int,
        state: str='closed',
    ) -> list[dict]:
        '''
        lists pull-requests against `base`, most recently updated first. Merging updates a
        pull-request, so recently merged ones are listed before older ones.
        '''
        return await self._request(
            self._repo_url('pulls'),
            params={
                'base': base,
                'state': state,
                'sort': 'updated',
                'direction': 'desc',
                'page': page,
                'per_page': per_page,
            },
        )

    async def file_content(self, path: str, ref: str) -> str:
        '''
        returns the (utf-8-decoded) contents of the file at given path, as of given ref.

        raises FileFetchError if the file does not exist, is not a regular file (e.g. a
        directory), or could not be retrieved or decoded.
        '''
        url = self._repo_url('contents', urllib.parse.quote(path.lstrip('/')))
        try:
            content = await self._request(url, params={'ref': ref})
        except RemoteApiError as rae:
            raise FileFetchError(str(rae), status=rae.status, url=url) from rae

        if isinstance(content, list):
            raise FileFetchError(f'{path=} is a directory', url=url)
        if content.get('type') != 'file':
            raise FileFetchError(f'{path=} is not a file ({content.get("type")=})', url=url)
        if content.get('encoding') != 'base64':
            raise FileFetchError(f'unsupported encoding {content.get("encoding")=}', url=url)

        try:
            return base64.b64decode(content['content']).decode('utf-8')
        except (binascii.Error, UnicodeDecodeError) as e:
            raise FileFetchError(f'failed to decode {path=}: {e}', url=url) from e

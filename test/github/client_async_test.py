import base64
import contextlib
import json

import aiohttp
import pytest

import github
import github.client_async as gca


class FakeResponse:
    def __init__(self, status: int, payload):
        self.status = status
        self.reason = 'OK' if self.ok else 'Not Found'
        self.payload = payload

    @property
    def ok(self):
        return self.status < 400

    async def json(self):
        return self.payload

    async def text(self):
        return json.dumps(self.payload)


class FakeSession:
    def __init__(self, responses: dict=None, error: Exception=None):
        self.responses = responses or {}
        self.error = error
        self.requests = []

    @contextlib.asynccontextmanager
    async def request(self, method, url, params=None, headers=None, timeout=None):
        self.requests.append({
            'method': method,
            'url': url,
            'params': params,
            'headers': headers,
        })
        if self.error:
            raise self.error

        status, payload = self.responses.get(url, (404, {'message': 'Not Found'}))
        yield FakeResponse(status=status, payload=payload)

    async def close(self):
        pass


API = 'https://api.github.com/repos/gardener/cc-utils'


def client(session, token='token'):
    return gca.Client(
        owner='gardener',
        repo='cc-utils',
        token=token,
        session=session,
    )


def file_content(text: str) -> dict:
    return {
        'type': 'file',
        'encoding': 'base64',
        'content': base64.b64encode(text.encode('utf-8')).decode('utf-8'),
    }


@pytest.mark.asyncio
async def test_listing_parameters():
    session = FakeSession(responses={
        f'{API}/pulls': (200, []),
        f'{API}/commits': (200, [{'sha': 'abc'}]),
    })
    examinee = client(session)

    assert await examinee.pulls(base='master', page=2, per_page=100) == []
    assert await examinee.commits('master', 3, 50) == [{'sha': 'abc'}]

    pulls_rq, commits_rq = session.requests
    assert pulls_rq['params'] == {
        'base': 'master',
        'state': 'closed',
        'sort': 'updated',
        'direction': 'desc',
        'page': 2,
        'per_page': 100,
    }
    assert commits_rq['params'] == {'sha': 'master', 'page': 3, 'per_page': 50}
    assert pulls_rq['headers']['Authorization'] == 'Bearer token'


@pytest.mark.asyncio
async def test_anonymous_access():
    session = FakeSession(responses={API: (200, {'default_branch': 'main'})})
    examinee = client(session, token=None)

    assert await examinee.default_branch() == 'main'
    assert 'Authorization' not in session.requests[0]['headers']


@pytest.mark.asyncio
async def test_unsuccessful_response():
    examinee = client(FakeSession())

    with pytest.raises(gca.RemoteApiError) as ei:
        await examinee.latest_release()

    assert ei.value.status == 404
    assert ei.value.url == f'{API}/releases/latest'


@pytest.mark.asyncio
async def test_transport_error():
    examinee = client(FakeSession(error=aiohttp.ClientConnectionError('connection reset')))

    with pytest.raises(gca.RemoteApiError) as ei:
        await examinee.tags(page=1, per_page=100)

    assert ei.value.status is None


@pytest.mark.asyncio
async def test_file_content():
    session = FakeSession(responses={
        f'{API}/contents/docs/CHANGELOG.md': (200, file_content('## v1.0.0\n- ü\n')),
    })
    examinee = client(session)

    assert await examinee.file_content(path='docs/CHANGELOG.md', ref='abc') == '## v1.0.0\n- ü\n'
    assert session.requests[0]['params'] == {'ref': 'abc'}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    'response',
    [
        (404, {'message': 'Not Found'}),
        (200, [{'type': 'file', 'name': 'README.md'}]), # directory
        (200, {'type': 'symlink', 'target': 'other.md'}),
        (200, {'type': 'file', 'encoding': 'none', 'content': ''}), # too large
        (200, {'type': 'file', 'encoding': 'base64', 'content': '//79'}), # not utf-8
        (500, {'message': 'Internal Server Error'}),
    ],
)
async def test_file_content_unavailable(response):
    examinee = client(FakeSession(responses={f'{API}/contents/CHANGELOG.md': response}))

    with pytest.raises(gca.FileFetchError):
        await examinee.file_content(path='CHANGELOG.md', ref='abc')


@pytest.mark.asyncio
async def test_owned_session_is_closed():
    examinee = gca.Client(owner='o', repo='r')

    async with examinee:
        session = examinee.session
        assert not session.closed

    assert session.closed


def test_github_api(monkeypatch):
    monkeypatch.delenv('GITHUB_SERVER_URL', raising=False)
    monkeypatch.setenv('GITHUB_TOKEN', 'env-token')

    examinee = github.github_api(repo_url='https://github.com/gardener/cc-utils')
    assert examinee.api_url == 'https://api.github.com'
    assert (examinee.owner, examinee.repo) == ('gardener', 'cc-utils')
    assert examinee.token == 'env-token'

    monkeypatch.setenv('GITHUB_API_URL', 'https://github.example.com/api/v3')
    examinee = github.github_api(repo_url='github.example.com/org/repo.git', token='token')
    assert examinee.api_url == 'https://github.example.com/api/v3'
    assert examinee.repo == 'repo'
    assert examinee.token == 'token'


def test_host_org_and_repo_from_env(monkeypatch):
    monkeypatch.setenv('GITHUB_SERVER_URL', 'https://github.example.com')
    monkeypatch.setenv('GITHUB_REPOSITORY', 'org/repo')

    assert github.host_org_and_repo() == ('github.example.com', 'org', 'repo')

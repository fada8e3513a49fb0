# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

import os

import aiohttp

import github.client_async


def server_host() -> str:
    '''
    returns the github-host to talk to (from GITHUB_SERVER_URL, as set for GitHub-Actions-runs;
    defaults to github.com)
    '''
    return os.environ.get('GITHUB_SERVER_URL', 'https://github.com').removeprefix('https://')


def host_org_and_repo(
    repo_url: str=None,
) -> tuple[str, str, str]:
    '''
    returns a three-tuple of `host`, `org`, `repo`. If repo_url is passed, it is assumed point to
    a github-hosted repository (it may or may not have a schema). Otherwise, fallback to
    environment variables GITHUB_SERVER_URL, GITHUB_REPOSITORY, as set for GitHub-Actions-runs
    is done.
    '''
    if repo_url:
        if '://' in repo_url:
            repo_url = repo_url.split('://')[-1]
        host, org, repo = repo_url.strip('/').removesuffix('.git').split('/')
    else:
        host = server_host()
        org, repo = os.environ['GITHUB_REPOSITORY'].split('/')

    return host, org, repo


def api_url(
    host: str,
) -> str:
    '''
    returns the REST-API base-url for the given github-host. For GitHub-Enterprise, the
    environment variable GITHUB_API_URL (as set for GitHub-Actions-runs) is honoured.
    '''
    if host == 'github.com':
        return github.client_async.DEFAULT_API_URL

    return os.environ.get('GITHUB_API_URL', f'https://{host}/api/v3')


def github_api(
    repo_url: str=None,
    token: str=None,
    session: aiohttp.ClientSession=None,
    timeout_seconds: int=None,
) -> github.client_async.Client:
    '''
    returns an initialised (async) github-api client for the given repository, honouring some
    environment variables typically present for GitHub-Actions-runs.
    '''
    host, org, repo = host_org_and_repo(
        repo_url=repo_url,
    )

    token = token or os.environ.get('GITHUB_TOKEN')

    return github.client_async.Client(
        owner=org,
        repo=repo,
        token=token,
        api_url=api_url(host=host),
        session=session,
        timeout_seconds=timeout_seconds,
    )

#!/usr/bin/env python

import argparse
import asyncio
import logging
import os
import sys
import uuid

import dacite
import yaml

import changelog.generate as cg
import changelog.log
import changelog.model as cm
import github
import github.client_async as gca


logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description='generate changelog from pull-requests merged between the two latest releases',
    )
    parser.add_argument(
        '--cfg',
        default=None,
        help='path to YAML-file w/ changelog-cfg (values passed as arguments take precedence)',
    )
    parser.add_argument(
        '--repo-url',
        default=None,
        help='github-repo-url ({host}/{org}/{repo}). derived from GitHubActions-Env-Vars by default',
    )
    parser.add_argument(
        '--github-auth-token',
        default=os.environ.get('GITHUB_TOKEN', None),
        help='the github-auth-token to use (defaults to GitHub-Action\'s default)',
    )
    parser.add_argument(
        '--title',
        default=os.environ.get('INPUT_TITLE', None),
    )
    parser.add_argument(
        '--prefix',
        default=os.environ.get('INPUT_PREFIX', None),
        help='prefix to prepend to each pull-request title (e.g. `-` or `*`)',
    )
    parser.add_argument(
        '--branch',
        default=os.environ.get('INPUT_BRANCH') or None,
        help='branch to read commits and pull-requests from (defaults to default-branch)',
    )
    parser.add_argument(
        '--changelog-path',
        default=None,
        help=f'path of changelog-file to append (default: {cm.DEFAULT_CHANGELOG_PATH})',
    )
    parser.add_argument(
        '--outfile',
        default='-',
        help='output file to write changelog to (`-` for stdout, which is the default)',
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        default=False,
    )

    return parser.parse_args(argv)


def changelog_cfg(parsed: argparse.Namespace) -> cm.ChangelogCfg:
    raw_cfg = {}
    if parsed.cfg:
        with open(parsed.cfg) as f:
            raw_cfg = yaml.safe_load(f) or {}

    if parsed.repo_url or 'GITHUB_REPOSITORY' in os.environ:
        host, owner, repo = github.host_org_and_repo(repo_url=parsed.repo_url)
        raw_cfg['host'] = host
        raw_cfg['owner'] = owner
        raw_cfg['repo'] = repo

    overwrites = {
        'github_token': parsed.github_auth_token,
        'title': parsed.title,
        'prefix': parsed.prefix,
        'branch': parsed.branch,
        'changelog_path': parsed.changelog_path,
    }
    raw_cfg |= {
        name: value for name, value in overwrites.items()
        if value is not None
    }

    return cm.ChangelogCfg.from_dict(raw_cfg)


def write_action_outputs(
    changelog: cm.Changelog,
    path: str,
):
    '''
    appends outputs `changelog` and `is-empty` to given GitHub-Actions-output-file
    '''
    delimiter = f'EOF-{uuid.uuid4()}'
    with open(path, 'a') as f:
        f.write(f'changelog<<{delimiter}\n{changelog.text}\n{delimiter}\n')
        f.write(f'is-empty={str(changelog.is_empty).lower()}\n')


def main(argv=None):
    parsed = parse_args(argv)

    changelog.log.configure_default_logging(
        stdout_level=logging.DEBUG if parsed.verbose else logging.INFO,
    )

    try:
        cfg = changelog_cfg(parsed)
    except (dacite.DaciteError, ValueError) as e:
        logger.error(f'invalid changelog-cfg: {e}')
        sys.exit(1)
    logger.info(f'generating changelog for {cfg.owner}/{cfg.repo}')

    try:
        result = asyncio.run(cg.generate_changelog(cfg=cfg))
    except (cm.ChangelogError, gca.RemoteApiError) as e:
        logger.error(f'failed to generate changelog: {e}')
        sys.exit(1)

    if result.is_empty:
        logger.warning('no pull-requests found between the latest releases')

    if parsed.outfile == '-':
        sys.stdout.write(result.text)
    else:
        with open(parsed.outfile, 'w') as f:
            f.write(result.text)

    if (github_output := os.environ.get('GITHUB_OUTPUT')):
        write_action_outputs(changelog=result, path=github_output)


if __name__ == '__main__':
    main()

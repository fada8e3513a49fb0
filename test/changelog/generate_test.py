import pytest

import changelog.generate as cg
import changelog.model as cm


def cfg(**kwargs) -> cm.ChangelogCfg:
    return cm.ChangelogCfg(
        title='## What\'s changed',
        prefix='-',
        github_token='token',
        owner='gardener',
        repo='cc-utils',
        **kwargs,
    )


@pytest.fixture
def repository(fake_github):
    return fake_github(
        default_branch='main',
        latest_release='v1.2.0',
        releases=['v1.2.0', 'v1.1.1', 'v1.1.0'],
        tags=[
            ('v1.2.0', 'c4'),
            ('v1.1.1', 'c4'), # re-tagged
            ('v1.1.0', 'c1'),
        ],
        commits=['c5', 'c4', 'c3', 'c2', 'c1'],
        pulls=[
            fake_github.pull(title='unreleased', commit_sha='c5', number=5),
            fake_github.pull(title='Bump dependencies', commit_sha='c4', number=4),
            fake_github.pull(title='Fix typo', commit_sha='c2', number=2),
            fake_github.pull(title='Initial', commit_sha='c1', number=1),
        ],
        files={('CHANGELOG.md', 'c1'): '## v1.1.0\n- Initial\n'},
    )


@pytest.mark.asyncio
async def test_generate_changelog(repository):
    changelog = await cg.generate_changelog(cfg=cfg(), client=repository)

    assert changelog.text == (
        '## What\'s changed\n'
        '- Bump dependencies\n'
        '- Fix typo\n'
        '## v1.1.0\n'
        '- Initial\n'
    )
    assert not changelog.is_empty

    # default-branch is used for listing commits and pull-requests
    assert repository.requests['commits:main'] == [1]
    assert repository.requests['pulls:main'] == [1]
    assert len(repository.requests['repository']) == 1


@pytest.mark.asyncio
async def test_generate_changelog_for_configured_branch(repository):
    await cg.generate_changelog(cfg=cfg(branch='release-v1'), client=repository)

    assert repository.requests['repository'] == []
    assert repository.requests['commits:release-v1'] == [1]


@pytest.mark.asyncio
async def test_tags_are_fetched_once(repository):
    generator = cg.ChangelogGenerator(cfg=cfg(page_size=1), client=repository)

    await generator.generate()

    requested_pages = repository.requests['tags']
    assert sorted(requested_pages) == requested_pages
    assert len(requested_pages) == len(set(requested_pages))


@pytest.mark.asyncio
async def test_generate_changelog_without_previous_release(fake_github):
    fake = fake_github(
        latest_release='v1.0.0',
        releases=['v1.0.0'],
        tags=[('v1.0.0', 'c1')],
        commits=['c1'],
    )

    with pytest.raises(cm.NoPreviousRelease):
        await cg.generate_changelog(cfg=cfg(), client=fake)


@pytest.mark.asyncio
async def test_generate_changelog_ignores_newer_prereleases(fake_github):
    fake = fake_github(
        latest_release='v1.2.0',
        releases=[
            {'tag_name': 'v2.0.0-rc1', 'draft': False, 'prerelease': True},
            'v1.2.0',
            'v1.1.0',
        ],
        tags=[('v2.0.0-rc1', 'c6'), ('v1.2.0', 'c4'), ('v1.1.0', 'c1')],
        commits=['c6', 'c5', 'c4', 'c3', 'c2', 'c1'],
        pulls=[
            fake_github.pull(title='Prepare v2', commit_sha='c6', number=6),
            fake_github.pull(title='Fix typo', commit_sha='c2', number=2),
            fake_github.pull(title='Initial', commit_sha='c1', number=1),
        ],
    )

    changelog = await cg.generate_changelog(cfg=cfg(), client=fake)

    assert changelog.lines == ('- Fix typo',)
    assert changelog.prior_content == ''

'''
Changelog Generator

Generates the changelog for the latest release of a GitHub repository. The changelog consists of
the titles of all pull-requests merged between the previous release and the latest release, each
prefixed (e.g. with `-`), followed by the contents of the repository's changelog-file as of the
previous release.

Releases are assumed to be tagged on a single (linear) branch, and pull-requests are assumed to
be merged (or squashed) into exactly one commit on that branch. The range of commits between two
releases is determined by looking up the commits the two release-tags point to in the branch's
commit-history (newest first); each pull-request whose merge-commit lies within that range is
included.

see `changelog.generate.generate_changelog` for the main entry-point.
'''

import changelog.cli

changelog.cli.main()

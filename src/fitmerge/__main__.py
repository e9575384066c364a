from fitmerge.cli.app import main

main()

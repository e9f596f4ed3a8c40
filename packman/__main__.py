from packman.cli.app import main

main()

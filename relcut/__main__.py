from relcut.cli.app import main

main()

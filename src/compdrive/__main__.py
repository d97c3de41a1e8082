from compdrive.cli.main import main

main()

from install_rain.cli.app import main

main()

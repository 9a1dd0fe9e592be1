from modserver.cli import main

main()

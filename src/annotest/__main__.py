from annotest.cli import main

main()

from plancritic.cli import main

main()

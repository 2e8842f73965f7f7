from dicechain.cli.commands import main

main()

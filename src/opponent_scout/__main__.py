from opponent_scout.cli.app import main

main()

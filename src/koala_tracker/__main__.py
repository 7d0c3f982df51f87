from koala_tracker.cli import main

main()

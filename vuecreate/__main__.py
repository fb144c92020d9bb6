from vuecreate.cli import main

main()

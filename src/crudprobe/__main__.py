from crudprobe.cli import main

main()

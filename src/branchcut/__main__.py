from branchcut.cli import main

main()

from shellgibi.shell import main

main()

from ifshow.cli import main

main()

from .ziplog import main

main()

from matchbot.main import main

main()

from resources.sample import main

main()

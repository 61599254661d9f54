from restock_bot.main import main

main()

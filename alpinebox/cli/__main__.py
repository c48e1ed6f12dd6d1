from alpinebox.cli import main

main()

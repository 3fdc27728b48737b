from zerto_rpo.main import main

main()

from verify_proxy.server import main

main()

from plugbuild.app import main

main()

from sdk_build_action.cli import main

main()

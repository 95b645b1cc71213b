from website_deploy.cli import main

main()

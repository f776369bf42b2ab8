from license_check.cli.license_check import main

if __name__ == "__main__":
    main()

from project_coordinator.cli import main

if __name__ == "__main__":
    main()

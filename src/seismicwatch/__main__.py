"""Command-line interface."""
from seismicwatch.main import main

if __name__ == "__main__":
    main()

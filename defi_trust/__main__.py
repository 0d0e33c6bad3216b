"""Command-line entry point for the DeFi trust engine server."""

from defi_trust.main import main

if __name__ == "__main__":
    main()

"""Entry point for 'python -m flowtokens' command."""

from flowtokens.cli import main

if __name__ == "__main__":
    main()

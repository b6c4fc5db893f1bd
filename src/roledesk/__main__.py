"""Entry point for 'python -m roledesk' command."""

from roledesk.cli import main

if __name__ == "__main__":
    main()

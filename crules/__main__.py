"""
Main entry point for the crules CLI.
"""

from crules.cli import cli


def main() -> None:
    """Main function for the crules CLI."""
    cli()


if __name__ == "__main__":
    main()

"""Entry point for 'python -m codeflow' command.

This module allows the CodeFlow CLI to be invoked using 'python -m codeflow'.
"""

from codeflow.cli import main

if __name__ == "__main__":
    main()

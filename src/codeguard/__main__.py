"""Entry point for running CodeGuard as a module.

Usage:
    python -m codeguard [command] [options]

Example:
    python -m codeguard analyze src/ --mode qa_automation --threshold 75
    python -m codeguard check
"""

from codeguard.cli import app

if __name__ == "__main__":
    app()

from __future__ import annotations

from feedbackform.cli import cli

if __name__ == "__main__":
    cli()

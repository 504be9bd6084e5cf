"""
FairPrice CLI Entry Point

Enables running FairPrice as a module:
    python -m fairprice [command] [options]
"""

from fairprice.cli.main import main

if __name__ == "__main__":
    main()

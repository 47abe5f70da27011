"""
__main__.py — Permite ejecutar el deploy como módulo.

    python -m hugopages deploy
"""

from hugopages.cli import main

if __name__ == "__main__":
    main()

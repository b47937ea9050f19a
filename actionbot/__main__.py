"""Module entrypoint for `python -m actionbot`.

Purpose: Delegate to `actionbot.gateway.main` to log in and start dispatching.
"""

from .gateway import main


if __name__ == "__main__":
    main()

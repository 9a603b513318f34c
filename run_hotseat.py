import sys
import os

# Ensure src layout is on path when running directly from repo root.
ROOT = os.path.dirname(os.path.abspath(__file__))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from quoridor_engine.render.pygame_renderer import main

if __name__ == "__main__":
    main()

import os
import sys

# Ensure project root is in path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from urbact.cli import app

if __name__ == "__main__":
    app()

"""
Run with: python -m thumbwheel
"""
import sys

from thumbwheel.main import main

if __name__ == "__main__":
    sys.exit(main())

"""Finn launcher"""
import sys

from finn.main import main

if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
Receipt Engine - Entry Point

Prints a shopping receipt with sales tax for a cart bought in a given
jurisdiction.

Usage:
    python main.py interactive
    python main.py calculate --state CA --item "book|12.49|1|general" --item "apple|0.50|6|food"
    python main.py calculate --state NY --file cart.csv --export-json receipt.json
    python main.py rates --state NY
"""

from receipt_engine.cli import main

if __name__ == "__main__":
    main()

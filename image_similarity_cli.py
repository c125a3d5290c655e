#!/usr/bin/env python3
"""Simple CLI for running the pairwise image similarity check.

Usage example:
  python image_similarity_cli.py ./images_a ./images_b 0.98 -p 2 --out-dir ./reports
"""
from image_similarity.cli import main


if __name__ == "__main__":
    main()

"""
Entry Point Script (Bootstrap)
==============================
Development runner for the viewer.

Why is this file needed?
------------------------
1. It is located outside the 'src' package to act as a convenient runner.
2. It puts 'src' on 'sys.path' so 'from seismicwatch...' resolves without
   installing the package.

Usage:
    $ python run.py [--events feed.geojson] [--topology countries-110m.json]
"""
import sys
import os

current_dir: str = os.path.dirname(os.path.abspath(__file__))
src_path: str = os.path.join(current_dir, 'src')
sys.path.insert(0, src_path)

from seismicwatch.main import main

if __name__ == "__main__":
    main()

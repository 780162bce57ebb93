"""
Day 06: File I/O & File Formats

Modular experiments comparing how long it takes to write and read tables,
and how much disk they use, across:
- CSV (delimited text)
- HDF5 (binary container), with Parquet for reference
- FITS (flexible astronomy format)

on small random tables and a real downloaded Kepler dataset.
"""

"""
ordmerkle command-line interface.
"""

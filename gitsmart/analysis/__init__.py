"""
Analysis package for gitsmart.

The modules here operate purely on the records produced by
gitsmart.log_parser and on raw diff text; none of them spawn git.
"""

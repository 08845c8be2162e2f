"""
related-domains — discover domains operationally related to a seed list.

TLD variants of every seed are fingerprinted over DNS and probed for their
first HTTP redirect hop; confident matches can be appended to the seed file.
"""

VERSION = "v1.0.0"

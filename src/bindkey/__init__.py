"""Load DNSSEC private key files written by BIND dnssec-keygen."""

__author__ = "ft"

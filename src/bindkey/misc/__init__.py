"""Code using external cryptographic libraries."""

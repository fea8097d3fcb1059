"""Code shared by the private key loader and the tools."""

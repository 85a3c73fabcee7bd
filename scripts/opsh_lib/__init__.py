"""
opsh_lib - Shared library for the opsh operator shell

This package contains the components of opsh, an interactive command-line
front end for configuring and operating a YANG-modeled routing daemon.
"""

__version__ = "1.0.0"

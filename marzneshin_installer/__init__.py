"""Marzneshin installer - panel setup and certificate automation."""

__version__ = "0.1.0"
__author__ = "Marzneshin Installer Contributors"

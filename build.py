"""
Build script for creating a standalone executable using PyInstaller.

This script bundles the CLI application and its dependencies into a single
executable file. litellm loads provider metadata from package data at runtime,
so its data files are collected explicitly.
"""

import PyInstaller.__main__  # type: ignore

PyInstaller.__main__.run(
    ["main.py", "--onefile", "--collect-data=litellm", "--name=vulnlens"]
)

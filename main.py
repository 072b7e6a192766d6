#!/usr/bin/env python3
"""
Encrypted content scanner entry point
"""
from encguard.cli import cli

if __name__ == '__main__':
    cli()

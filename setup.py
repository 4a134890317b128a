#!/usr/bin/env python3
"""
Setup script for MySQL DB Tools package.
"""

import re

from setuptools import setup, find_packages

# Read version from package metadata without importing it
version = {}
with open("mysql_db_tools/__init__.py") as f:
    for line in f:
        if re.match(r"^__(version|author)__\s*=", line):
            exec(line, version)

# Read requirements
with open("requirements.txt") as f:
    requirements = [line.strip() for line in f if line.strip() and not line.startswith("#")]

setup(
    name="mysql-db-tools",
    version=version["__version__"],
    author=version["__author__"],
    description="Pooled MySQL query helpers for agent tool servers",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.11",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Database",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    keywords="mysql database pool asyncio mcp tools",
)

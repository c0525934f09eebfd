# setup.py
from setuptools import setup, find_packages

setup(
    name="dbguard",
    version="0.1.0",
    description="Connection management and query-safety layer for relational database drivers",
    packages=find_packages(
        exclude=(
            "tests",
            "tests.*",
            "docs",
            "build",
            "dist",
        )
    ),
    install_requires=[
        "PyMySQL>=1.0",
    ],
    extras_require={
        "postgres": ["psycopg2-binary>=2.9"],
        "test": ["pytest>=7"],
    },
    python_requires=">=3.10",
)

#!/usr/bin/env python3
"""
Setup script for Route53 Sync package.
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="route53-sync",
    version="1.0.0",
    author="Route53 Sync Team",
    author_email="team@example.com",
    description="Bidirectional synchronization between a local DNS mirror and AWS Route 53",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/example/route53-sync",
    packages=find_packages(include=["route53_sync", "route53_sync.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Internet :: Name Service (DNS)",
        "Topic :: System :: Systems Administration",
    ],
    python_requires=">=3.8",
    install_requires=requirements,
    extras_require={
        "test": ["behave>=1.2.6"],
    },
    entry_points={
        "console_scripts": [
            "route53-sync=route53_sync.cli.main:main",
        ],
    },
    include_package_data=True,
    package_data={
        "route53_sync": ["*.yaml", "*.yml"],
    },
)

#!/usr/bin/env python3
"""
Setup script for Landlord Auditor
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read the README file
readme_path = Path(__file__).parent / "README.md"
long_description = ""
if readme_path.exists():
    with open(readme_path, "r", encoding="utf-8") as f:
        long_description = f.read()

# Read requirements
requirements_path = Path(__file__).parent / "requirements.txt"
requirements = []
if requirements_path.exists():
    with open(requirements_path, "r", encoding="utf-8") as f:
        requirements = [line.strip() for line in f if line.strip() and not line.startswith("#")]

setup(
    name="landlord-auditor",
    version="1.0.0",
    author="Landlord Auditor Team",
    author_email="",
    description="Landlord compliance risk audit: questionnaire scoring and PDF reports",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["run_app"],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Legal Industry",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Office/Business",
    ],
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        "pdf": [
            "weasyprint>=60.0",
        ],
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=22.0.0",
            "flake8>=6.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "landlord-auditor=run_app:main",
        ],
    },
    include_package_data=True,
    package_data={
        "landlord_audit": ["assets/*.json", "templates/*.md.j2"],
    },
    keywords="landlord tenancy compliance audit risk report",
    project_urls={
        "Bug Reports": "",
        "Source": "",
        "Documentation": "",
    },
)

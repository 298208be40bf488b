"""
Setup script for insight-engine.

Insight Engine is the rule-based classification core of the
teacher dashboard. It serves two roles:

1. Badge Evaluator - Explainable Progress Star, Mastery and Persistence suggestions
2. Attention Classifier - Which students need a teacher's attention now

The 'insight' command inspects engine decisions from exported JSON
snapshots.
"""

from setuptools import find_packages, setup

setup(
    name="insight-engine",
    version="1.0.0",
    description="Explainable badge and attention classification for teacher dashboards",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "insight=insight_engine.cli.insight_cli:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
    ],
    keywords="education badges recommendations teacher-dashboard rules",
)

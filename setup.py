"""
Setup script for prep-forecast.

prep-forecast is the outcome-forecasting engine of the exam-preparation
tracker. Given a learner profile and optional rolling telemetry it returns:

1. Score Forecast - most likely / best / worst marks with a confidence range
2. Rank Forecast - historical All-India Rank for each score point
3. Planning Aids - admission odds, analysis, roadmap and risks

The 'prep-forecast' command is the terminal entry point.
"""

from setuptools import find_packages, setup

setup(
    name="prep-forecast",
    version="1.0.0",
    description="Rule-based exam outcome forecasting: score, rank, admission odds and roadmap",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["config"],
    python_requires=">=3.10",
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
            "prep-forecast=src.cli.forecast_cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
    ],
    keywords="exam forecasting rank prediction education",
)

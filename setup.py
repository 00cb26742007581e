"""
Setup script for quadratic-tutor.

Quadratic Tutor is a terminal-based adaptive tutor for quadratic
equations. It combines:

1. Expert Solver - Bhaskara formula with worked, step-by-step solutions
2. Curriculum - Rule-based difficulty labels and equation generation
3. Student Model - Persistent learner profile driving the next action

The 'quadratic-tutor' command is the entry point; 'python -m src.tutor'
works from a source checkout.
"""

from setuptools import find_namespace_packages, setup

setup(
    name="quadratic-tutor",
    version="1.0.0",
    description="Adaptive terminal tutor for quadratic equations",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Quadratic Tutor Contributors",
    packages=find_namespace_packages(include=["src", "src.tutor"]),
    py_modules=["config"],
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Database
        "sqlalchemy>=2.0.0",
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
            "quadratic-tutor=src.tutor.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
        "Topic :: Scientific/Engineering :: Mathematics",
    ],
    keywords="tutor quadratic bhaskara education adaptive-learning cli",
)

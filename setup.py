# setup.py
from setuptools import setup, find_packages

setup(
    name="finbot-ledger",
    version="0.1.0",
    description="Chat-style expense logging with period budgets and category breakdowns",
    packages=find_packages(include=["finbot", "finbot.*"]),
    python_requires=">=3.8",
    install_requires=[
        "click>=7.0",
        "pyyaml>=5.3",
        "python-dotenv>=0.19",
        "xlsxwriter>=3.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "openpyxl>=3.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "finbot=finbot.cli:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)

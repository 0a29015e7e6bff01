"""Package setup for Receipt Engine."""

from setuptools import setup, find_packages

setup(
    name="receipt-engine",
    version="1.0.0",
    description="Shopping receipts with jurisdiction sales tax and category exemptions",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    packages=find_packages(include=["receipt_engine", "receipt_engine.*"]),
    python_requires=">=3.11",
    install_requires=[
        "rich>=13.0",
        "pandas>=2.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "receipt-engine=receipt_engine.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Financial and Insurance Industry",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Office/Business :: Financial :: Point-Of-Sale",
    ],
    keywords="sales-tax receipt checkout exemption rounding",
)

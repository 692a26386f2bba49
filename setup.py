from setuptools import setup, find_packages

setup(
    name="boinet_pkg",
    version="0.1.0",
    description="Operating-characteristics simulator for the BOIN-ET dose-finding design family",
    author="Duy Nguyen",

    packages=find_packages("src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "scipy",
        "pandas",
        "joblib",
        "statsmodels",
        "pydantic>=2",
        "structlog",
        "typer",
        "rich",
        "tomli; python_version<'3.11'",
    ],
    extras_require={
        "test": ["pytest", "tomli_w"],
        "toml": ["tomli_w"],
    },
    entry_points={
        "console_scripts": ["boinet=boinet_pkg.cli.main:app"],
    },
)

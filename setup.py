from setuptools import setup, find_packages

setup(
    name="codegateway",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "click",
        "pyyaml",
        "pydantic>=2",
        "rich",
        "tree-sitter>=0.23",
        "tree-sitter-javascript",
        "tree-sitter-typescript",
        "structlog",
        "gitignore-parser",
        "pathspec>=0.12",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "codegateway = codegateway.cli.main:main",
        ],
    },
)

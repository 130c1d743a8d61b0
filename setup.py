from setuptools import setup, find_packages

setup(
    name="convergraph",
    version="0.1.0",
    description="Mutation co-occurrence graphs for finding convergently evolved shared substitutions",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "pandas>=2.0",
        "numpy>=1.24",
        "networkx>=3.0",
        "pyyaml>=6.0",
        "biopython>=1.80",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "convergraph=convergraph.cli:main"
        ]
    },
    include_package_data=True,
)

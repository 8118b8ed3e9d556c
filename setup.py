from setuptools import setup, find_packages

setup(
    name="housegen",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["batch_runner"],
    install_requires=[
        "numpy>=1.24.0",
        "matplotlib>=3.7.0",
        "scipy>=1.10.0",
        "rtree>=1.0.1",  # For spatial indexing
        "pandas>=1.5.0",  # For batch run summaries
        "tqdm>=4.64.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "black>=22.0.0",
            "flake8>=4.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "housegen=housegen.run:main",
        ],
    },
    python_requires=">=3.9",
    author="Your Name",
    description="Seeded procedural floor plan generation: room graphs, grid layouts and connectors"
)

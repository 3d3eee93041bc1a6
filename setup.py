from setuptools import setup, find_packages

setup(
    name="brandhub",
    version="0.1.0",
    description="Marketing-operations dashboard service with a three-level content taxonomy",
    packages=find_packages(include=["brandhub", "brandhub.*"]),
    python_requires=">=3.8",
    install_requires=[
        "Flask>=2.3.0",
        "Flask-SQLAlchemy>=3.1.0",
        "SQLAlchemy>=2.0.0",
        "Flask-Migrate>=4.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "black>=23.0.0",
            "pylint>=2.17.0",
        ]
    },
)

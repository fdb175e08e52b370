"""Setup script for cdc-conductor."""

from setuptools import find_packages, setup

setup(
    name="cdc-conductor",
    version="0.1.0",
    description="Compile, deploy and validate Debezium Server CDC pipelines",
    author="CDC Conductor Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "typer>=0.9.0",  # CLI framework
        "rich>=13.0.0",  # CLI output
        "boto3>=1.26.0",  # Kinesis validation
        "requests>=2.28.0",  # Signal proxy and HTTP validation
        "pyyaml>=6.0",  # Configuration handling
        "typing-extensions>=4.0.0",  # Type hints support
        "kubernetes>=28.1.0",  # DebeziumServer custom resources
        "redis>=5.0.0",  # Redis validation
        "qdrant-client>=1.12.0",  # Qdrant validation
        "grpcio>=1.60.0",  # Qdrant gRPC status codes
        "pymilvus>=2.4.0",  # Milvus validation
    ],
    package_data={
        "cdc_conductor": ["py.typed"],
    },
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.1.0",
            "black>=22.1.0",
            "isort>=5.10.1",
            "flake8>=4.0.1",
            "mypy>=1.0.0",  # Type checking
        ],
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=4.1.0",
            "mock>=5.0.0",  # For mocking in tests
            "requests-mock>=1.11.0",  # HTTP mocking
            "moto>=5.0.0",  # AWS mocking
        ],
    },
    entry_points={
        "console_scripts": [
            "cdc-conductor=cdc_conductor.cli.main:app",
        ],
    },
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: System :: Distributed Computing",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
)

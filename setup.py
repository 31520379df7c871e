from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="qiwi-bill-payments",
    version="1.0.0",
    author="QIWI API",
    author_email="bss@qiwi.com",
    description="Python SDK for QIWI Bill Payments REST API",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/QIWI-API/bill-payments-python-sdk",
    packages=find_packages(exclude=["tests", "tests.*", "examples", "examples.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Office/Business :: Financial",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    python_requires=">=3.8",
    install_requires=[
        "httpx>=0.24",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "black>=23.0",
            "mypy>=1.0",
            "pylint>=2.17",
        ],
        "examples": [
            "python-dotenv>=1.0",
        ],
    },
    package_data={
        "qiwi_bill_payments": ["py.typed"],
    },
)

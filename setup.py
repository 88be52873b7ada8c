"""
Setup configuration for the AWS SSO Mapper CDK constructs.

This setup.py file configures the Python package that provides CDK
constructs for IAM Identity Center permission sets and account assignments,
together with a CDK application that synthesizes them from a mapping document.
"""

from setuptools import setup, find_packages

# Read long description from README
try:
    with open("README.md", "r", encoding="utf-8") as f:
        long_description = f.read()
except FileNotFoundError:
    long_description = "CDK constructs for IAM Identity Center permission sets and assignments"

setup(
    name="aws-sso-mapper-cdk",
    version="1.0.0",
    description="CDK constructs for IAM Identity Center permission sets and account assignments",
    long_description=long_description,
    long_description_content_type="text/markdown",

    # Package configuration
    packages=find_packages(exclude=["tests*"]),
    py_modules=["app"],
    python_requires=">=3.8",

    # Dependencies
    install_requires=[
        "aws-cdk-lib>=2.100.0,<3.0.0",
        "constructs>=10.3.0,<11.0.0",
        "cdk-nag>=2.27.0",
    ],

    # Development dependencies
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
            "black>=23.7.0",
            "flake8>=6.0.0",
            "mypy>=1.5.0",
        ]
    },

    # Package classifiers
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: System :: Systems Administration",
        "Topic :: Security",
    ],

    keywords="aws cdk sso identity-center permission-sets iam",

    # Entry points for CLI tools
    entry_points={
        "console_scripts": [
            "aws-sso-mapper-synth=app:main",
        ],
    },

    include_package_data=True,
    zip_safe=False,
)
